from __future__ import annotations

"""Resampled model evaluation.

For every fold the caller's fit function is trained on the analysis rows and
scored on the assessment rows; per-fold scores are then averaged into an
:class:`~foldwise.contracts.results.AggregateReport`.

Folds are independent, so with ``n_jobs > 1`` they run on a thread pool. Each
worker only reads the shared frame, and results are joined back in fold order,
so the report does not depend on scheduling.
"""

import logging
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from foldwise.components.interfaces import FitFn, MetricFn, PredictFn
from foldwise.components.splitters.types import Fold
from foldwise.contracts.eval_configs import EvalModel, FoldErrorPolicy
from foldwise.contracts.results import AggregateReport, SkippedFold, json_safe_params
from foldwise.core.frames import require_columns
from foldwise.core.progress import ProgressCallback, ProgressTracker
from foldwise.errors import ConfigurationError, FoldError

from .aggregate import fold_records, summarize_metrics
from .folds import accepts_seed, run_fold
from .metrics import get_metric
from .types import FoldOutcome

logger = logging.getLogger(__name__)

MetricsArg = Union[Mapping[str, MetricFn], Sequence[Union[str, MetricFn]]]


def resolve_metrics(metrics: MetricsArg) -> Dict[str, MetricFn]:
    """Normalise metrics to an ordered ``{name: fn}`` mapping.

    Accepts a mapping, or a sequence mixing registered metric names and
    callables (named after ``fn.metric_name`` or ``fn.__name__``).
    """
    if isinstance(metrics, Mapping):
        out = dict(metrics)
    else:
        out = {}
        for m in metrics:
            if isinstance(m, str):
                out[m] = get_metric(m).fn
            elif callable(m):
                name = getattr(m, "metric_name", None) or getattr(m, "__name__", None) or repr(m)
                out[str(name)] = m
            else:
                raise ConfigurationError(f"Not a metric: {m!r}")
    if not out:
        raise ConfigurationError("At least one metric is required")
    return out


@dataclass
class Evaluator:
    """Fit/score a model over resampling folds and aggregate the metrics.

    Parameters
    ----------
    metrics : mapping or sequence
        Metric functions ``(predictions, truth) -> float`` (see :func:`resolve_metrics`).
    outcome : str
        Outcome column; it is withheld from the predict function.
    n_jobs : int
        Number of worker threads for folds (1 = sequential).
    fit_timeout : float, optional
        Seconds allowed per fit; a slower fit fails its fold with ``FitTimeoutError``.
    on_fold_error : {"abort", "skip"}
        ``abort`` raises the first failing fold (in fold order); ``skip``
        leaves failed folds out of the aggregate and lists them in ``report.skipped``.
    return_train_score : bool
        Also score each model on its own analysis rows.
    """

    metrics: MetricsArg
    outcome: str
    n_jobs: int = 1
    fit_timeout: Optional[float] = None
    on_fold_error: FoldErrorPolicy = "abort"
    return_train_score: bool = False
    _metrics: Dict[str, MetricFn] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._metrics = resolve_metrics(self.metrics)
        if self.on_fold_error not in ("abort", "skip"):
            raise ConfigurationError(f"on_fold_error must be 'abort' or 'skip'; got {self.on_fold_error!r}")
        if int(self.n_jobs) < 1:
            raise ConfigurationError(f"n_jobs must be >= 1; got {self.n_jobs}")

    @classmethod
    def from_config(cls, cfg: EvalModel, *, outcome: str, metrics: Optional[MetricsArg] = None) -> "Evaluator":
        return cls(
            metrics=metrics if metrics is not None else list(cfg.metrics),
            outcome=outcome,
            n_jobs=cfg.n_jobs,
            fit_timeout=cfg.fit_timeout,
            on_fold_error=cfg.on_fold_error,
            return_train_score=cfg.return_train_score,
        )

    @property
    def metric_names(self) -> List[str]:
        return list(self._metrics)

    def evaluate(
        self,
        folds: Sequence[Fold],
        fit_fn: FitFn,
        predict_fn: PredictFn,
        *,
        params: Optional[Dict[str, Any]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> AggregateReport:
        folds = list(folds)
        if not folds:
            raise ValueError("No folds to evaluate.")
        for data in {id(f.data): f.data for f in folds}.values():
            require_columns(data, self.outcome)

        pass_seed = accepts_seed(fit_fn)
        tracker = ProgressTracker(progress, total=len(folds), label="resamples")

        def _one(fold: Fold) -> FoldOutcome:
            try:
                return run_fold(
                    fold,
                    fit_fn=fit_fn,
                    predict_fn=predict_fn,
                    metrics=self._metrics,
                    outcome=self.outcome,
                    pass_seed=pass_seed,
                    fit_timeout=self.fit_timeout,
                    return_train_score=self.return_train_score,
                )
            finally:
                tracker.step()

        outcomes: List[FoldOutcome] = []
        skipped: List[SkippedFold] = []

        def _collect(fold: Fold, call: Callable[[], FoldOutcome]) -> None:
            try:
                outcomes.append(call())
            except FoldError as exc:
                if params:
                    exc.with_params(params)
                if self.on_fold_error == "abort":
                    raise
                logger.warning("Skipping %s: %s", fold.label, exc)
                skipped.append(
                    SkippedFold(
                        fold_id=fold.fold_id,
                        repeat=fold.repeat,
                        error_type=type(exc).__name__,
                        message=str(exc),
                    )
                )

        try:
            if self.n_jobs == 1:
                for fold in folds:
                    _collect(fold, lambda fold=fold: _one(fold))
            else:
                with futures.ThreadPoolExecutor(max_workers=int(self.n_jobs), thread_name_prefix="foldwise") as pool:
                    submitted = [(fold, pool.submit(_one, fold)) for fold in folds]
                    try:
                        for fold, fut in submitted:
                            _collect(fold, fut.result)
                    except FoldError:
                        for _, fut in submitted:
                            fut.cancel()
                        raise
        finally:
            tracker.finish()

        return self._report(outcomes, skipped, params)

    def _report(
        self,
        outcomes: List[FoldOutcome],
        skipped: List[SkippedFold],
        params: Optional[Dict[str, Any]],
    ) -> AggregateReport:
        notes: List[str] = []
        for s in skipped:
            notes.append(f"Fold {s.fold_id} (repeat {s.repeat}) skipped: {s.error_type}: {s.message}")
        for o in outcomes:
            for name, reason in o.undefined.items():
                notes.append(f"{o.fold.label}: {name} undefined ({reason})")
        if not outcomes:
            notes.append("All folds failed; no metric could be aggregated.")

        return AggregateReport(
            metrics=summarize_metrics(outcomes, self.metric_names, return_train_score=self.return_train_score),
            folds=fold_records(outcomes),
            skipped=skipped,
            params=json_safe_params(params or {}),
            notes=notes,
        )


def evaluate(
    folds: Sequence[Fold],
    fit_fn: FitFn,
    predict_fn: PredictFn,
    metrics: MetricsArg,
    *,
    outcome: str,
    n_jobs: int = 1,
    fit_timeout: Optional[float] = None,
    on_fold_error: FoldErrorPolicy = "abort",
    return_train_score: bool = False,
    params: Optional[Dict[str, Any]] = None,
    progress: Optional[ProgressCallback] = None,
) -> AggregateReport:
    """Functional entry point around :class:`Evaluator`."""
    evaluator = Evaluator(
        metrics=metrics,
        outcome=outcome,
        n_jobs=n_jobs,
        fit_timeout=fit_timeout,
        on_fold_error=on_fold_error,
        return_train_score=return_train_score,
    )
    return evaluator.evaluate(folds, fit_fn, predict_fn, params=params, progress=progress)
