from __future__ import annotations

"""Workflows bundle a model specification with a recipe.

A :class:`Workflow` is a value: fitting it never mutates it, it returns a
:class:`FittedWorkflow` holding the prepared recipe and the fitted estimator.
"""

import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from scipy.stats import norm

from foldwise.components.evaluation.metrics import PRED_CLASS, PRED_NUMERIC, PROBA_PREFIX
from foldwise.components.recipes.recipe import PreparedRecipe, Recipe
from foldwise.errors import ConfigurationError

from .model_spec import ModelSpec

logger = logging.getLogger(__name__)

PRED_LOWER = ".pred_lower"
PRED_UPPER = ".pred_upper"
INTERCEPT = "(Intercept)"


def _supports_return_std(estimator: Any) -> bool:
    try:
        return "return_std" in inspect.signature(estimator.predict).parameters
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True, eq=False)
class Workflow:
    model: ModelSpec
    recipe: Recipe

    @property
    def outcome(self) -> str:
        return self.recipe.outcome

    def set_params(self, **params: Any) -> "Workflow":
        """Return a workflow whose model has ``params`` overridden."""
        return replace(self, model=self.model.set_params(**params))

    def fit(self, data: pd.DataFrame, seed: Optional[int] = None) -> "FittedWorkflow":
        prepared = self.recipe.prep(data)
        X = prepared.predictor_frame(data)
        y = prepared.outcome_values(data)
        estimator = self.model.make_estimator(seed)
        estimator.fit(X, y)
        if self.model.mode == "classification":
            # ".pred_class" is reserved for the hard labels
            clashing = [lvl for lvl in getattr(estimator, "classes_", ()) if str(lvl) == "class"]
            if clashing:
                raise ConfigurationError(
                    f"outcome {self.outcome!r} has a level named 'class', which collides with {PRED_CLASS!r}; "
                    "recode the outcome before fitting"
                )
        return FittedWorkflow(workflow=self, prepared=prepared, estimator=estimator)


@dataclass(frozen=True, eq=False)
class FittedWorkflow:
    workflow: Workflow
    prepared: PreparedRecipe
    estimator: Any

    @property
    def mode(self) -> str:
        return self.workflow.model.mode

    @property
    def predictors(self) -> List[str]:
        return list(self.prepared.predictors)

    def predict(self, new_data: pd.DataFrame, level: float = 0.95) -> pd.DataFrame:
        """Prediction frame aligned to ``new_data``'s index.

        Classification: ``.pred_class`` plus one ``.pred_<level>`` probability
        column per class when the estimator supports ``predict_proba``.
        Regression: ``.pred``, plus ``.pred_lower`` / ``.pred_upper`` when the
        estimator reports a predictive standard deviation (``return_std``).
        The interval is the normal one at coverage ``level``.
        """
        X = self.prepared.predictor_frame(new_data)
        if self.mode == "regression":
            if not _supports_return_std(self.estimator):
                return pd.DataFrame(
                    {PRED_NUMERIC: np.asarray(self.estimator.predict(X), dtype=float)}, index=new_data.index
                )
            if not 0.0 < level < 1.0:
                raise ConfigurationError(f"interval level must be in (0, 1); got {level}")
            mean, std = self.estimator.predict(X, return_std=True)
            mean = np.asarray(mean, dtype=float)
            half = norm.ppf(0.5 + level / 2.0) * np.asarray(std, dtype=float)
            return pd.DataFrame(
                {PRED_NUMERIC: mean, PRED_LOWER: mean - half, PRED_UPPER: mean + half}, index=new_data.index
            )

        out = pd.DataFrame({PRED_CLASS: self.estimator.predict(X)}, index=new_data.index)
        if hasattr(self.estimator, "predict_proba"):
            proba = np.asarray(self.estimator.predict_proba(X))
            for j, level_name in enumerate(self.estimator.classes_):
                out[f"{PROBA_PREFIX}{level_name}"] = proba[:, j]
        return out

    def tidy(self) -> pd.DataFrame:
        """Coefficient table of a linear model.

        One row per term: ``(Intercept)`` first, then each predictor in
        training order. ``std_error`` is added when the estimator exposes a
        coefficient covariance (``sigma_``, e.g. Bayesian ridge). Multiclass
        models get one block of rows per class, labelled in a ``class``
        column.
        """
        coef = getattr(self.estimator, "coef_", None)
        if coef is None:
            raise ConfigurationError(f"{type(self.estimator).__name__} has no coefficients to tidy")
        coef = np.atleast_2d(np.asarray(coef, dtype=float))
        intercept = np.ravel(np.asarray(getattr(self.estimator, "intercept_", 0.0), dtype=float))
        if intercept.size == 1:
            intercept = np.repeat(intercept, coef.shape[0])
        terms = [INTERCEPT] + self.predictors

        blocks = []
        for row, b0 in zip(coef, intercept):
            blocks.append(pd.DataFrame({"term": terms, "estimate": np.concatenate([[b0], row])}))
        if len(blocks) == 1:
            table = blocks[0]
            sigma = getattr(self.estimator, "sigma_", None)
            if sigma is not None:
                se = np.sqrt(np.diag(np.asarray(sigma, dtype=float)))
                # the intercept is not part of the posterior covariance
                table["std_error"] = np.concatenate([[np.nan], se])
            return table

        for block, cls in zip(blocks, self.estimator.classes_):
            block.insert(0, "class", cls)
        return pd.concat(blocks, ignore_index=True)

    def augment(self, new_data: pd.DataFrame) -> pd.DataFrame:
        """``new_data`` with its prediction columns appended."""
        return pd.concat([new_data, self.predict(new_data)], axis=1)

    def extract_fit(self) -> Any:
        return self.estimator

    def extract_recipe(self) -> PreparedRecipe:
        return self.prepared
