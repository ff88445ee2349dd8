from __future__ import annotations

from typing import Any, Callable, Mapping, Type, Union

from foldwise.components.recipes.steps import BUILTIN_STEPS, Step
from foldwise.contracts.recipe_configs import RecipeStepModel
from foldwise.errors import ConfigurationError
from foldwise.registries.base import Registry

_STEPS: Registry[str, Type[Step]] = Registry(_name="recipe_steps")

for _cls in BUILTIN_STEPS:
    _STEPS.register(_cls.kind)(_cls)


def register_step(kind: str) -> Callable[[Type[Step]], Type[Step]]:
    """Register a custom :class:`Step` subclass under ``kind``."""
    def deco(cls: Type[Step]) -> Type[Step]:
        cls.kind = kind
        return _STEPS.register(kind)(cls)

    return deco


def make_step(cfg: Union[RecipeStepModel, Mapping[str, Any], Step]) -> Step:
    """Build a step from ``{"kind": ..., **options}`` (or pass a step through)."""
    if isinstance(cfg, Step):
        return cfg
    model = cfg if isinstance(cfg, RecipeStepModel) else RecipeStepModel.model_validate(dict(cfg))
    cls = _STEPS.get(model.kind)
    try:
        return cls(**model.options())
    except TypeError as exc:
        raise ConfigurationError(f"Invalid options for step {model.kind!r}: {exc}") from exc


def list_step_kinds() -> list[str]:
    return sorted(_STEPS.keys())
