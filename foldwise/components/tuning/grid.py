from __future__ import annotations

"""Exhaustive hyperparameter search over resampling folds.

The search enumerates every combination of a parameter grid with
:class:`sklearn.model_selection.ParameterGrid` (keys sorted, last key varying
fastest), evaluates each combination, and ranks candidates by the mean of one
metric. Equal means are ordered by an optional caller-supplied complexity
(lower first), then by enumeration order.
"""

import logging
import math
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from sklearn.model_selection import ParameterGrid

from foldwise.components.evaluation.metrics import higher_is_better
from foldwise.components.splitters.types import Fold
from foldwise.contracts.results import AggregateReport, GridSearchEntry, json_safe_params
from foldwise.core.progress import ProgressCallback, ProgressTracker
from foldwise.errors import ConfigurationError, EmptyGridError, FoldError

logger = logging.getLogger(__name__)

Params = Dict[str, Any]
CandidateFn = Callable[[Params, Sequence[Fold]], AggregateReport]
FoldsArg = Union[Sequence[Fold], Callable[[Params], Sequence[Fold]]]


def candidates(param_grid: Mapping[str, Sequence[Any]]) -> List[Params]:
    """All parameter combinations of ``param_grid``; empty for an empty grid."""
    if not param_grid:
        return []
    grid: Dict[str, List[Any]] = {}
    for name, values in param_grid.items():
        if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
            raise ConfigurationError(f"Grid values for {name!r} must be a sequence; got {values!r}")
        grid[name] = list(values)
        if not grid[name]:
            return []
    return list(ParameterGrid(grid))


@dataclass
class GridSearch:
    """Rank parameter combinations by an aggregated resampling metric.

    Parameters
    ----------
    evaluate_candidate : callable
        ``(params, folds) -> AggregateReport`` for one combination.
    metric : str
        Metric whose mean ranks the candidates.
    maximize : bool, optional
        Rank descending (default for most metrics). ``None`` uses the
        direction registered for ``metric``, falling back to descending.
    complexity : callable, optional
        ``params -> number``; lower values win ties on the metric.
    n_jobs : int
        Worker threads used for candidates.
    """

    evaluate_candidate: CandidateFn
    metric: str
    maximize: Optional[bool] = None
    complexity: Optional[Callable[[Params], float]] = None
    n_jobs: int = 1

    results_: Optional[List[GridSearchEntry]] = None
    _raw_params: Dict[int, Params] = field(default_factory=dict, repr=False)

    @property
    def descending(self) -> bool:
        return higher_is_better(self.metric) if self.maximize is None else bool(self.maximize)

    def _run_candidate(self, params: Params, folds: FoldsArg) -> AggregateReport:
        fold_set = folds(params) if callable(folds) else folds
        try:
            report = self.evaluate_candidate(params, fold_set)
        except FoldError as exc:
            raise exc.with_params(params)
        if self.metric not in report.metrics:
            raise ConfigurationError(
                f"Ranking metric {self.metric!r} not in evaluated metrics {sorted(report.metrics)}"
            )
        return report

    def _sort_key(self, index: int, params: Params, mean: Optional[float]) -> tuple:
        undefined = mean is None or not math.isfinite(mean)
        score = 0.0 if undefined else (-mean if self.descending else mean)
        tie = float(self.complexity(params)) if self.complexity is not None else 0.0
        return (undefined, score, tie, index)

    def search(
        self,
        param_grid: Mapping[str, Sequence[Any]],
        folds: FoldsArg,
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> List[GridSearchEntry]:
        """Evaluate every combination and return entries ranked best-first.

        ``folds`` is either a fixed fold sequence shared by all candidates or a
        builder ``params -> folds``.
        """
        combos = candidates(param_grid)
        if not combos:
            logger.warning("Parameter grid is empty; nothing to search")
            self.results_ = []
            return []

        tracker = ProgressTracker(progress, total=len(combos), label="grid")
        try:
            if int(self.n_jobs) <= 1:
                reports = []
                for params in combos:
                    reports.append(self._run_candidate(params, folds))
                    tracker.step()
            else:
                with futures.ThreadPoolExecutor(max_workers=int(self.n_jobs), thread_name_prefix="foldwise-grid") as pool:
                    submitted = [pool.submit(self._run_candidate, params, folds) for params in combos]
                    reports = []
                    try:
                        for fut in submitted:
                            reports.append(fut.result())
                            tracker.step()
                    except Exception:
                        for fut in submitted:
                            fut.cancel()
                        raise
        finally:
            tracker.finish()

        means = [r.mean(self.metric) for r in reports]
        order = sorted(range(len(combos)), key=lambda i: self._sort_key(i, combos[i], means[i]))

        self.results_ = [
            GridSearchEntry(
                rank=rank,
                index=i,
                params=json_safe_params(combos[i]),
                metric=self.metric,
                mean=means[i],
                report=reports[i],
            )
            for rank, i in enumerate(order, start=1)
        ]
        self._raw_params = {i: combos[i] for i in range(len(combos))}
        return list(self.results_)

    def select_best(self) -> GridSearchEntry:
        """Top-ranked entry of the last :meth:`search`."""
        if not self.results_:
            raise EmptyGridError("No candidates were evaluated; the parameter grid is empty.")
        return self.results_[0]

    def best_params(self) -> Params:
        """Parameters of the best entry with their original (non-JSON) values."""
        best = self.select_best()
        return dict(self._raw_params[best.index])


def search(
    param_grid: Mapping[str, Sequence[Any]],
    folds: FoldsArg,
    metric: str,
    evaluate_candidate: CandidateFn,
    *,
    maximize: Optional[bool] = None,
    complexity: Optional[Callable[[Params], float]] = None,
    n_jobs: int = 1,
    progress: Optional[ProgressCallback] = None,
) -> List[GridSearchEntry]:
    """Functional entry point around :class:`GridSearch`."""
    gs = GridSearch(
        evaluate_candidate=evaluate_candidate,
        metric=metric,
        maximize=maximize,
        complexity=complexity,
        n_jobs=n_jobs,
    )
    return gs.search(param_grid, folds, progress=progress)
