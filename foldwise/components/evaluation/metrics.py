from __future__ import annotations

"""Metric functions.

Every metric has the signature ``metric(predictions, truth) -> float``.

``predictions`` is either a 1D array-like (hard labels, numeric predictions or,
for ``roc_auc``, positive-class scores) or a prediction frame with the columns
produced by :meth:`foldwise.components.workflows.FittedWorkflow.predict`:

- ``.pred_class``     hard class labels
- ``.pred_<level>``   class probabilities, one column per outcome level
- ``.pred``           numeric predictions (regression)

Metrics that cannot be computed for the given fold (e.g. AUC with a single
class present) raise :class:`~foldwise.errors.MetricUndefinedError`.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    cohen_kappa_score,
    f1_score,
    log_loss as _sk_log_loss,
    mean_absolute_error,
    mean_squared_error,
    r2_score,
    roc_auc_score,
    roc_curve as _sk_roc_curve,
)

from foldwise.errors import ConfigurationError, MetricUndefinedError
from foldwise.registries.base import Registry

MetricKind = Literal["class", "prob", "numeric"]

PRED_CLASS = ".pred_class"
PRED_NUMERIC = ".pred"
PROBA_PREFIX = ".pred_"


@dataclass(frozen=True)
class MetricInfo:
    name: str
    fn: Callable[[Any, Any], float]
    kind: MetricKind
    higher_is_better: bool = True


_METRICS: Registry[str, MetricInfo] = Registry(_name="metrics")


def _register(name: str, kind: MetricKind, higher_is_better: bool = True):
    def deco(fn: Callable[[Any, Any], float]) -> Callable[[Any, Any], float]:
        fn.metric_name = name  # type: ignore[attr-defined]
        _METRICS.register(name)(MetricInfo(name, fn, kind, higher_is_better))
        return fn

    return deco


# --- prediction extraction -------------------------------------------------


def _truth(truth: Any) -> np.ndarray:
    y = np.asarray(truth)
    if y.ndim != 1:
        y = y.ravel()
    return y


def _check_len(y_true: np.ndarray, other: np.ndarray, name: str) -> None:
    if y_true.shape[0] != other.shape[0]:
        raise ValueError(f"Length mismatch: truth({y_true.shape[0]}) vs {name}({other.shape[0]}).")


def hard_labels(predictions: Any) -> np.ndarray:
    if isinstance(predictions, pd.DataFrame):
        if PRED_CLASS in predictions.columns:
            return predictions[PRED_CLASS].to_numpy()
        if PRED_NUMERIC in predictions.columns:
            return predictions[PRED_NUMERIC].to_numpy()
        raise ValueError(f"Prediction frame has neither {PRED_CLASS!r} nor {PRED_NUMERIC!r}")
    return np.asarray(predictions).ravel()


def numeric_predictions(predictions: Any) -> np.ndarray:
    if isinstance(predictions, pd.DataFrame):
        if PRED_NUMERIC not in predictions.columns:
            raise ValueError(f"Prediction frame has no {PRED_NUMERIC!r} column")
        return predictions[PRED_NUMERIC].to_numpy(dtype=float)
    return np.asarray(predictions, dtype=float).ravel()


def class_probabilities(predictions: Any) -> Optional[pd.DataFrame]:
    """Return the probability columns (renamed to their levels), or None if absent."""
    if not isinstance(predictions, pd.DataFrame):
        return None
    cols = [
        c
        for c in predictions.columns
        if isinstance(c, str) and c.startswith(PROBA_PREFIX) and c != PRED_CLASS
    ]
    if not cols:
        return None
    return predictions[cols].set_axis([c[len(PROBA_PREFIX):] for c in cols], axis=1)


def _level_key(level: Any) -> str:
    return str(level)


# --- classification ----------------------------------------------------------


@_register("accuracy", "class")
def accuracy(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth)
    y_pred = hard_labels(predictions)
    _check_len(y_true, y_pred, "predictions")
    return float(accuracy_score(y_true, y_pred))


@_register("balanced_accuracy", "class")
def balanced_accuracy(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth)
    y_pred = hard_labels(predictions)
    _check_len(y_true, y_pred, "predictions")
    return float(balanced_accuracy_score(y_true, y_pred))


@_register("f1_macro", "class")
def f1_macro(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth)
    y_pred = hard_labels(predictions)
    _check_len(y_true, y_pred, "predictions")
    return float(f1_score(y_true, y_pred, average="macro", zero_division=0))


@_register("kap", "class")
def kap(predictions: Any, truth: Any) -> float:
    """Cohen's kappa."""
    y_true = _truth(truth)
    y_pred = hard_labels(predictions)
    _check_len(y_true, y_pred, "predictions")
    if np.unique(np.concatenate([y_true, y_pred])).size < 2:
        raise MetricUndefinedError("kappa is undefined when a single class is observed and predicted", metric="kap")
    return float(cohen_kappa_score(y_true, y_pred))


EventLevel = Literal["first", "second"]


def _event(levels: List[str], event_level: EventLevel) -> str:
    if event_level not in ("first", "second"):
        raise ConfigurationError(f"event_level must be 'first' or 'second'; got {event_level!r}")
    return levels[0] if event_level == "first" else levels[1]


@_register("roc_auc", "prob")
def roc_auc(predictions: Any, truth: Any, event_level: EventLevel = "second") -> float:
    """Area under the ROC curve.

    Binary outcomes: foldwise treats the *second* level in sorted order as
    the event by default, matching scikit-learn's positive label; pass
    ``event_level="first"`` for the first level instead. Multiclass:
    one-vs-rest macro average. A 1D ``predictions`` is taken as the event
    score directly.
    """
    y_true = _truth(truth)
    present = np.unique(y_true)
    if present.size < 2:
        raise MetricUndefinedError(
            f"roc_auc is undefined with a single class present in truth ({present.tolist()})",
            metric="roc_auc",
        )

    probs = class_probabilities(predictions)
    if probs is None:
        if isinstance(predictions, pd.DataFrame):
            raise MetricUndefinedError("roc_auc requires class probability columns", metric="roc_auc")
        scores = np.asarray(predictions, dtype=float)
        _check_len(y_true, scores, "predictions")
        if scores.ndim == 1:
            return float(roc_auc_score(y_true, scores))
        return float(roc_auc_score(y_true, scores, multi_class="ovr", average="macro"))

    _check_len(y_true, probs.to_numpy(), "predictions")
    levels = sorted(probs.columns)
    if len(levels) == 2:
        event = _event(levels, event_level)
        y_bin = np.asarray([_level_key(v) == event for v in y_true], dtype=int)
        return float(roc_auc_score(y_bin, probs[event].to_numpy(dtype=float)))

    y_str = np.asarray([_level_key(v) for v in y_true])
    missing = sorted(set(y_str) - set(levels))
    if missing:
        raise MetricUndefinedError(f"roc_auc: no probability column for levels {missing}", metric="roc_auc")
    if len(set(y_str)) != len(levels):
        raise MetricUndefinedError(
            "roc_auc (one-vs-rest) is undefined when some outcome levels are absent from the fold",
            metric="roc_auc",
        )
    return float(
        roc_auc_score(y_str, probs[levels].to_numpy(dtype=float), multi_class="ovr", average="macro", labels=levels)
    )


def roc_curve(predictions: Any, truth: Any, event_level: EventLevel = "second") -> pd.DataFrame:
    """ROC curve points of a binary outcome.

    Returns a frame with ``threshold``, ``specificity`` and ``sensitivity``
    columns, ordered by increasing threshold. The event follows the same
    ``event_level`` convention as :func:`roc_auc`.
    """
    y_true = _truth(truth)
    if np.unique(y_true).size < 2:
        raise MetricUndefinedError("roc_curve is undefined with a single class present in truth", metric="roc_curve")

    probs = class_probabilities(predictions)
    if probs is None:
        if isinstance(predictions, pd.DataFrame):
            raise MetricUndefinedError("roc_curve requires class probability columns", metric="roc_curve")
        scores = np.asarray(predictions, dtype=float).ravel()
        levels = sorted(_level_key(v) for v in np.unique(y_true))
        if len(levels) != 2:
            raise ConfigurationError("roc_curve needs a binary outcome")
        event = _event(levels, event_level)
    else:
        levels = sorted(probs.columns)
        if len(levels) != 2:
            raise ConfigurationError(f"roc_curve needs a binary outcome; got levels {levels}")
        event = _event(levels, event_level)
        scores = probs[event].to_numpy(dtype=float)

    _check_len(y_true, scores, "predictions")
    y_bin = np.asarray([_level_key(v) == event for v in y_true], dtype=int)
    fpr, tpr, thresholds = _sk_roc_curve(y_bin, scores, drop_intermediate=False)
    curve = pd.DataFrame({"threshold": thresholds, "specificity": 1.0 - fpr, "sensitivity": tpr})
    return curve.iloc[::-1].reset_index(drop=True)


@_register("log_loss", "prob", higher_is_better=False)
def log_loss(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth)
    probs = class_probabilities(predictions)
    if probs is None:
        raise MetricUndefinedError("log_loss requires class probability columns", metric="log_loss")
    # scikit-learn reads probability columns in sorted label order
    levels = sorted(probs.columns)
    y_str = np.asarray([_level_key(v) for v in y_true])
    _check_len(y_true, probs.to_numpy(), "predictions")
    return float(_sk_log_loss(y_str, probs[levels].to_numpy(dtype=float), labels=levels))


# --- regression ----------------------------------------------------------------


@_register("rmse", "numeric", higher_is_better=False)
def rmse(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth).astype(float)
    y_pred = numeric_predictions(predictions)
    _check_len(y_true, y_pred, "predictions")
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


@_register("mae", "numeric", higher_is_better=False)
def mae(predictions: Any, truth: Any) -> float:
    y_true = _truth(truth).astype(float)
    y_pred = numeric_predictions(predictions)
    _check_len(y_true, y_pred, "predictions")
    return float(mean_absolute_error(y_true, y_pred))


@_register("rsq", "numeric")
def rsq(predictions: Any, truth: Any) -> float:
    """Coefficient of determination (R^2)."""
    y_true = _truth(truth).astype(float)
    y_pred = numeric_predictions(predictions)
    _check_len(y_true, y_pred, "predictions")
    if y_true.size < 2 or np.all(y_true == y_true[0]):
        raise MetricUndefinedError("rsq is undefined for constant truth", metric="rsq")
    return float(r2_score(y_true, y_pred))


# --- lookup ----------------------------------------------------------------------


def get_metric(name: str) -> MetricInfo:
    return _METRICS.get(name)


def list_metrics(kind: Optional[MetricKind] = None) -> List[str]:
    return sorted(k for k, info in _METRICS.items() if kind is None or info.kind == kind)


def higher_is_better(name: str) -> bool:
    info = _METRICS.try_get(name)
    return True if info is None else info.higher_is_better


def metric_set(*names: str) -> Dict[str, Callable[[Any, Any], float]]:
    """Bundle registered metrics into an ordered ``{name: fn}`` mapping."""
    if not names:
        raise ConfigurationError("metric_set needs at least one metric name")
    out: Dict[str, Callable[[Any, Any], float]] = {}
    for name in names:
        out[name] = get_metric(name).fn
    return out
