from __future__ import annotations

"""Named model specifications.

Maps a model type and mode to a scikit-learn estimator so callers can write
``model_spec("rand_forest", mode="classification", n_estimators=500)``
instead of importing estimator classes.
"""

from typing import Any, Tuple

from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import BayesianRidge, LinearRegression, LogisticRegression
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from foldwise.components.workflows.model_spec import ModelMode, ModelSpec
from foldwise.registries.base import Registry

_MODELS: Registry[Tuple[str, str], Any] = Registry(_name="models")

_MODELS.register(("decision_tree", "classification"))(DecisionTreeClassifier)
_MODELS.register(("decision_tree", "regression"))(DecisionTreeRegressor)
_MODELS.register(("rand_forest", "classification"))(RandomForestClassifier)
_MODELS.register(("rand_forest", "regression"))(RandomForestRegressor)
_MODELS.register(("logistic_reg", "classification"))(LogisticRegression)
_MODELS.register(("linear_reg", "regression"))(LinearRegression)
_MODELS.register(("bayes_linear_reg", "regression"))(BayesianRidge)
_MODELS.register(("nearest_neighbor", "classification"))(KNeighborsClassifier)
_MODELS.register(("nearest_neighbor", "regression"))(KNeighborsRegressor)


def register_model(name: str, mode: ModelMode):
    return _MODELS.register((name, mode))


def model_spec(name: str, *, mode: ModelMode = "classification", **params: Any) -> ModelSpec:
    estimator = _MODELS.get((name, mode))
    return ModelSpec(estimator=estimator, params=params, mode=mode, engine="sklearn")


def list_models() -> list[str]:
    return sorted(f"{name}/{mode}" for name, mode in _MODELS.keys())
