from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from foldwise.components.evaluation.evaluator import MetricsArg
from foldwise.components.splitters.types import Fold
from foldwise.components.tuning.grid import FoldsArg, GridSearch
from foldwise.components.workflows.workflow import Workflow
from foldwise.contracts.eval_configs import EvalModel
from foldwise.contracts.results import AggregateReport
from foldwise.contracts.tuning_configs import GridSearchConfig
from foldwise.core.progress import ProgressCallback
from foldwise.factories.eval_factory import make_evaluator

from .resampling import workflow_fit_fn, workflow_predict


def tune_grid(
    workflow: Workflow,
    folds: FoldsArg,
    param_grid: Optional[Mapping[str, Sequence[Any]]] = None,
    metrics: Optional[MetricsArg] = None,
    *,
    cfg: Optional[EvalModel] = None,
    search: Optional[GridSearchConfig] = None,
    complexity: Optional[Callable[[Dict[str, Any]], float]] = None,
    progress: Optional[ProgressCallback] = None,
) -> GridSearch:
    """Resample ``workflow`` for every combination of model parameters.

    Returns the :class:`GridSearch` after searching, so ``results_``,
    ``select_best()`` and ``best_params()`` are available.
    """
    search = search or GridSearchConfig()
    grid = param_grid if param_grid is not None else search.param_grid
    evaluator = make_evaluator(cfg, outcome=workflow.outcome, metrics=metrics)

    def _evaluate(params: Dict[str, Any], fold_set: Sequence[Fold]) -> AggregateReport:
        candidate = workflow.set_params(**params)
        return evaluator.evaluate(fold_set, workflow_fit_fn(candidate), workflow_predict, params=params)

    gs = GridSearch(
        evaluate_candidate=_evaluate,
        metric=search.metric or evaluator.metric_names[0],
        maximize=search.maximize,
        complexity=complexity,
        n_jobs=search.n_jobs,
    )
    gs.search(grid, folds, progress=progress)
    return gs


def finalize_workflow(workflow: Workflow, params: Mapping[str, Any]) -> Workflow:
    """Fix tuned parameters into the workflow (typically ``gs.best_params()``)."""
    return workflow.set_params(**dict(params))
