from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .common import JSONDict, ResultModel


class MetricSummary(ResultModel):
    """One metric aggregated over folds.

    ``values`` keeps one entry per aggregated fold (``None`` where the metric
    was undefined); ``mean``/``std`` are taken over the defined entries.
    """

    name: str
    mean: Optional[float] = None
    std: Optional[float] = None
    n: int = 0
    values: List[Optional[float]] = Field(default_factory=list)

    # self-evaluation on the analysis rows (return_train_score)
    train_mean: Optional[float] = None
    train_values: Optional[List[Optional[float]]] = None


class FoldRecord(ResultModel):
    fold_id: int
    repeat: int = 1
    n_analysis: int
    n_assessment: int
    scores: Dict[str, Optional[float]] = Field(default_factory=dict)
    train_scores: Optional[Dict[str, Optional[float]]] = None
    # metric name -> reason it could not be computed
    undefined: Dict[str, str] = Field(default_factory=dict)


class SkippedFold(ResultModel):
    fold_id: int
    repeat: int = 1
    error_type: str
    message: str


class AggregateReport(ResultModel):
    """Terminal output of a resampling evaluation."""

    metrics: Dict[str, MetricSummary] = Field(default_factory=dict)
    folds: List[FoldRecord] = Field(default_factory=list)
    skipped: List[SkippedFold] = Field(default_factory=list)
    params: JSONDict = Field(default_factory=dict)
    notes: List[str] = Field(default_factory=list)

    @property
    def n_folds(self) -> int:
        return len(self.folds)

    def mean(self, metric: str) -> Optional[float]:
        if metric not in self.metrics:
            raise KeyError(f"Metric {metric!r} not in report; have {sorted(self.metrics)}")
        return self.metrics[metric].mean

    def values(self, metric: str) -> List[Optional[float]]:
        if metric not in self.metrics:
            raise KeyError(f"Metric {metric!r} not in report; have {sorted(self.metrics)}")
        return list(self.metrics[metric].values)
