from __future__ import annotations

import inspect
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Mapping, Optional

from foldwise.components.interfaces import ModelBuilder
from foldwise.errors import ConfigurationError

ModelMode = Literal["classification", "regression"]


def _accepted_params(estimator_cls: Any) -> Optional[set]:
    """Constructor keywords of ``estimator_cls`` (None if it takes ``**kwargs``)."""
    try:
        sig = inspect.signature(estimator_cls)
    except (TypeError, ValueError):
        return None
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return None
    return set(sig.parameters)


def _maybe_set_random_state(estimator_cls: Any, kw: Dict[str, Any], seed_param: Optional[str], seed: Optional[int]) -> None:
    if seed is None or not seed_param:
        return
    allowed = _accepted_params(estimator_cls)
    if allowed is not None and seed_param in allowed and seed_param not in kw:
        kw[seed_param] = int(seed)


@dataclass(frozen=True, eq=False)
class ModelSpec(ModelBuilder):
    """Immutable description of a scikit-learn style estimator.

    ``params`` are constructor keywords. A fit seed is injected as
    ``seed_param`` (``random_state``) unless ``params`` already pins it.
    """

    estimator: Any
    params: Mapping[str, Any] = field(default_factory=dict)
    mode: ModelMode = "classification"
    seed_param: Optional[str] = "random_state"
    engine: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mode not in ("classification", "regression"):
            raise ConfigurationError(f"mode must be 'classification' or 'regression'; got {self.mode!r}")
        object.__setattr__(self, "params", dict(self.params))
        self._check_params(self.params)

    def _check_params(self, params: Mapping[str, Any]) -> None:
        allowed = _accepted_params(self.estimator)
        if allowed is None:
            return
        unknown = sorted(set(params) - allowed)
        if unknown:
            name = getattr(self.estimator, "__name__", repr(self.estimator))
            raise ConfigurationError(f"{name} does not accept parameter(s) {unknown}")

    def set_params(self, **params: Any) -> "ModelSpec":
        merged = {**self.params, **params}
        return replace(self, params=merged)

    def make_estimator(self, seed: Optional[int] = None) -> Any:
        kw = dict(self.params)
        _maybe_set_random_state(self.estimator, kw, self.seed_param, seed)
        return self.estimator(**kw)

    def __repr__(self) -> str:
        name = getattr(self.estimator, "__name__", repr(self.estimator))
        return f"ModelSpec({name}, mode={self.mode!r}, params={dict(self.params)!r})"
