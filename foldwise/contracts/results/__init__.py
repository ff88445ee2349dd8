from .common import JSONDict, ResultModel, finite_or_none, json_safe_params, sanitize_floats
from .resampling import AggregateReport, FoldRecord, MetricSummary, SkippedFold
from .tuning import GridSearchEntry

__all__ = [
    "ResultModel",
    "JSONDict",
    "finite_or_none",
    "sanitize_floats",
    "json_safe_params",
    "AggregateReport",
    "FoldRecord",
    "MetricSummary",
    "SkippedFold",
    "GridSearchEntry",
]
