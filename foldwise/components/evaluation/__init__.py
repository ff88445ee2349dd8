from .evaluator import Evaluator, evaluate, resolve_metrics
from .metrics import get_metric, higher_is_better, list_metrics, metric_set, roc_curve

__all__ = [
    "Evaluator",
    "evaluate",
    "resolve_metrics",
    "get_metric",
    "higher_is_better",
    "list_metrics",
    "metric_set",
    "roc_curve",
]
