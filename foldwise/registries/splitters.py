from __future__ import annotations

from typing import Callable, Union

from foldwise.components.interfaces import Splitter
from foldwise.contracts.split_configs import SplitCVModel, SplitHoldoutModel
from foldwise.registries.base import Registry

SplitConfig = Union[SplitHoldoutModel, SplitCVModel]

SplitterFactory = Callable[[SplitConfig], Splitter]

_SPLITTERS: Registry[str, SplitterFactory] = Registry(_name="splitters")

_BUILTINS_LOADED = False


def register_splitter(mode: str) -> Callable[[SplitterFactory], SplitterFactory]:
    return _SPLITTERS.register(mode.lower())


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from foldwise.registries.builtins import splitters as _  # noqa: F401
    _BUILTINS_LOADED = True


def make_splitter(cfg: SplitConfig) -> Splitter:
    _ensure_builtins()
    mode = getattr(cfg, "mode", "holdout")
    return _SPLITTERS.get(str(mode).lower())(cfg)


def list_split_modes() -> list[str]:
    _ensure_builtins()
    return sorted(list(_SPLITTERS.keys()))
