"""Resampling use-cases for workflows.

Correctness requirement
-----------------------
Each fold gets a *fresh* fit of the workflow, recipe included: the recipe is
prepped on the fold's analysis rows only, so no preprocessing statistic
(levels, means, zero-variance decisions) is learned from assessment rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import pandas as pd

from foldwise.components.evaluation.evaluator import MetricsArg
from foldwise.components.splitters.types import Fold, Split
from foldwise.components.workflows.workflow import FittedWorkflow, Workflow
from foldwise.contracts.eval_configs import EvalModel
from foldwise.contracts.results import AggregateReport
from foldwise.contracts.split_configs import SplitCVModel, SplitHoldoutModel
from foldwise.core.frames import coerce_frame
from foldwise.core.progress import ProgressCallback
from foldwise.factories.eval_factory import make_evaluator
from foldwise.factories.split_factory import make_splitter
from foldwise.runtime.random.rng import RngManager


def workflow_fit_fn(workflow: Workflow):
    def _fit(analysis: pd.DataFrame, seed: Optional[int] = None) -> FittedWorkflow:
        return workflow.fit(analysis, seed=seed)

    return _fit


def workflow_predict(fitted: FittedWorkflow, predictors: pd.DataFrame) -> pd.DataFrame:
    return fitted.predict(predictors)


def fit_resamples(
    workflow: Workflow,
    folds: Sequence[Fold],
    metrics: Optional[MetricsArg] = None,
    *,
    cfg: Optional[EvalModel] = None,
    progress: Optional[ProgressCallback] = None,
) -> AggregateReport:
    """Fit ``workflow`` on every fold's analysis set and score its assessment set."""
    evaluator = make_evaluator(cfg, outcome=workflow.outcome, metrics=metrics)
    return evaluator.evaluate(folds, workflow_fit_fn(workflow), workflow_predict, progress=progress)


def run_resampling(
    data: Any,
    workflow: Workflow,
    split_cfg: Union[SplitHoldoutModel, SplitCVModel],
    eval_cfg: Optional[EvalModel] = None,
    *,
    progress: Optional[ProgressCallback] = None,
) -> AggregateReport:
    """Config-driven resampling: build folds from ``split_cfg`` then :func:`fit_resamples`.

    ``eval_cfg.seed`` seeds the folds when ``split_cfg`` has no seed of its own.
    """
    if split_cfg.seed is None and eval_cfg is not None and eval_cfg.seed is not None:
        split_cfg = split_cfg.model_copy(update={"seed": eval_cfg.seed})
    folds = list(make_splitter(split_cfg).split(coerce_frame(data)))
    return fit_resamples(workflow, folds, cfg=eval_cfg, progress=progress)


@dataclass
class LastFit:
    """Final fit on the training set, scored once on the test set."""

    fitted: FittedWorkflow
    report: AggregateReport
    predictions: pd.DataFrame


def last_fit(
    workflow: Workflow,
    split: Split,
    metrics: Optional[MetricsArg] = None,
    *,
    seed: Optional[int] = None,
) -> LastFit:
    fold = split.as_fold(seed=RngManager(seed if seed is not None else split.seed).fold_seed(1))
    fitted_box: dict = {}

    def _fit(analysis: pd.DataFrame, seed: Optional[int] = None) -> FittedWorkflow:
        fitted_box["fitted"] = workflow.fit(analysis, seed=seed)
        return fitted_box["fitted"]

    evaluator = make_evaluator(None, outcome=workflow.outcome, metrics=metrics)
    report = evaluator.evaluate([fold], _fit, workflow_predict)
    fitted = fitted_box["fitted"]
    return LastFit(fitted=fitted, report=report, predictions=fitted.augment(split.testing()))
