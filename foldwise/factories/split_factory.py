from __future__ import annotations

from typing import Union

from foldwise.components.interfaces import Splitter
from foldwise.contracts.split_configs import SplitCVModel, SplitHoldoutModel
from foldwise.registries.splitters import make_splitter as _make_splitter

SplitConfig = Union[SplitHoldoutModel, SplitCVModel]


def make_splitter(cfg: SplitConfig) -> Splitter:
    """Resolve a split config to a splitter strategy via the registry."""
    return _make_splitter(cfg)
