from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, Mapping, Protocol

import pandas as pd

from foldwise.components.splitters.types import Fold

# Caller-supplied collaborators of the evaluator. All are opaque to foldwise.
FitFn = Callable[..., Any]                      # (analysis[, seed=]) -> fitted model
PredictFn = Callable[[Any, pd.DataFrame], Any]  # (fitted model, predictors) -> predictions
MetricFn = Callable[[Any, Any], float]          # (predictions, truth) -> score


class Splitter(Protocol):
    def split(self, data: pd.DataFrame) -> Iterator[Fold]:
        """Yield analysis/assessment folds over ``data``."""
        ...


class RecipeStep(Protocol):
    """A preprocessing transform with separate fit and apply phases.

    ``fit`` sees training data only and returns the learned state;
    ``apply`` must treat any later frame identically given that state.
    """

    def fit(self, frame: pd.DataFrame, predictors: list[str]) -> Dict[str, Any]:
        ...

    def apply(self, frame: pd.DataFrame, state: Mapping[str, Any]) -> pd.DataFrame:
        ...


class ModelBuilder(Protocol):
    def make_estimator(self, seed: int | None = None) -> Any:
        """Return a configured, unfitted estimator."""
        ...
