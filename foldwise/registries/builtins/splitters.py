"""Built-in resampling registrations."""

from __future__ import annotations

from foldwise.components.splitters.splitters import HoldOutSplitter, KFoldSplitter
from foldwise.registries.splitters import SplitConfig, register_splitter


@register_splitter("holdout")
def _holdout(cfg: SplitConfig):
    return HoldOutSplitter(cfg=cfg)


@register_splitter("kfold")
def _kfold(cfg: SplitConfig):
    return KFoldSplitter(cfg=cfg)
