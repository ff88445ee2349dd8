from __future__ import annotations

"""Fit/predict/score a single fold.

Leakage rules enforced here:

- the fit function only ever receives the fold's analysis rows;
- the predict function receives assessment rows with the outcome column
  removed;
- metric functions receive the assessment truth of that same fold only.
"""

import inspect
import logging
from concurrent import futures
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from foldwise.components.interfaces import FitFn, MetricFn, PredictFn
from foldwise.components.splitters.types import Fold
from foldwise.contracts.results.common import finite_or_none
from foldwise.errors import FitError, FitTimeoutError, FoldError, MetricUndefinedError

from .types import FoldOutcome

logger = logging.getLogger(__name__)


def accepts_seed(fn: Any) -> bool:
    """True if ``fn`` can be called with a ``seed=`` keyword."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    for p in sig.parameters.values():
        if p.kind is inspect.Parameter.VAR_KEYWORD:
            return True
        if p.name == "seed" and p.kind in (inspect.Parameter.KEYWORD_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            return True
    return False


def split_outcome(frame: pd.DataFrame, outcome: str) -> Tuple[pd.DataFrame, np.ndarray]:
    return frame.drop(columns=[outcome]), frame[outcome].to_numpy()


def _fit(
    fold: Fold,
    fit_fn: FitFn,
    analysis: pd.DataFrame,
    *,
    pass_seed: bool,
    timeout: Optional[float],
) -> Any:
    kwargs = {"seed": fold.seed} if pass_seed else {}

    if timeout is None:
        try:
            return fit_fn(analysis, **kwargs)
        except FoldError:
            raise
        except Exception as exc:
            raise FitError(
                f"fit failed: {type(exc).__name__}: {exc}", fold_id=fold.fold_id, repeat=fold.repeat
            ) from exc

    pool = futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="foldwise-fit")
    try:
        fut = pool.submit(fit_fn, analysis, **kwargs)
        done, _ = futures.wait([fut], timeout=timeout)
        if not done:
            # the worker thread cannot be interrupted; it finishes in the background
            raise FitTimeoutError(
                f"fit exceeded {timeout:g}s timeout", fold_id=fold.fold_id, repeat=fold.repeat
            )
        exc = fut.exception()
        if exc is not None:
            if isinstance(exc, FoldError):
                raise exc
            raise FitError(
                f"fit failed: {type(exc).__name__}: {exc}", fold_id=fold.fold_id, repeat=fold.repeat
            ) from exc
        return fut.result()
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


def _predict(fold: Fold, predict_fn: PredictFn, model: Any, predictors: pd.DataFrame) -> Any:
    try:
        return predict_fn(model, predictors)
    except Exception as exc:
        raise FoldError(
            f"predict failed: {type(exc).__name__}: {exc}", fold_id=fold.fold_id, repeat=fold.repeat
        ) from exc


def score_predictions(
    fold: Fold,
    metrics: Mapping[str, MetricFn],
    predictions: Any,
    y_true: np.ndarray,
) -> Tuple[Dict[str, Optional[float]], Dict[str, str]]:
    scores: Dict[str, Optional[float]] = {}
    undefined: Dict[str, str] = {}
    for name, fn in metrics.items():
        try:
            value = fn(predictions, y_true)
        except MetricUndefinedError as exc:
            exc.metric = exc.metric or name
            exc.fold_id = fold.fold_id
            logger.info("%s: metric %r undefined: %s", fold.label, name, exc)
            scores[name] = None
            undefined[name] = str(exc)
            continue
        except Exception as exc:
            raise FoldError(
                f"metric {name!r} failed: {type(exc).__name__}: {exc}",
                fold_id=fold.fold_id,
                repeat=fold.repeat,
            ) from exc
        scores[name] = finite_or_none(value)
        if scores[name] is None:
            undefined[name] = f"non-finite value {value!r}"
    return scores, undefined


def run_fold(
    fold: Fold,
    *,
    fit_fn: FitFn,
    predict_fn: PredictFn,
    metrics: Mapping[str, MetricFn],
    outcome: str,
    pass_seed: bool = False,
    fit_timeout: Optional[float] = None,
    return_train_score: bool = False,
) -> FoldOutcome:
    """Fit on the analysis rows and score on the assessment rows of ``fold``."""
    analysis = fold.analysis()
    assessment = fold.assessment()

    model = _fit(fold, fit_fn, analysis, pass_seed=pass_seed, timeout=fit_timeout)

    predictors, y_true = split_outcome(assessment, outcome)
    predictions = _predict(fold, predict_fn, model, predictors)
    scores, undefined = score_predictions(fold, metrics, predictions, y_true)

    train_scores = None
    if return_train_score:
        # self-evaluation on rows the model has already seen
        seen, y_seen = split_outcome(analysis, outcome)
        train_predictions = _predict(fold, predict_fn, model, seen)
        train_scores, _ = score_predictions(fold, metrics, train_predictions, y_seen)

    return FoldOutcome(fold=fold, scores=scores, undefined=undefined, train_scores=train_scores)
