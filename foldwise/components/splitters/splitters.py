from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

import pandas as pd

from foldwise.contracts.split_configs import SplitCVModel, SplitHoldoutModel
from foldwise.runtime.random.rng import RngManager

from ..interfaces import Splitter
from .holdout import split as holdout_split
from .kfold import make_folds
from .types import Fold


@dataclass
class HoldOutSplitter(Splitter):
    cfg: SplitHoldoutModel

    def split(self, data: pd.DataFrame) -> Iterator[Fold]:
        sp = holdout_split(
            data,
            self.cfg.train_frac,
            strata=self.cfg.strata,
            seed=self.cfg.seed,
        )
        yield sp.as_fold(seed=RngManager(self.cfg.seed).fold_seed(1))


@dataclass
class KFoldSplitter(Splitter):
    cfg: SplitCVModel

    def split(self, data: pd.DataFrame) -> Iterator[Fold]:
        yield from make_folds(
            data,
            self.cfg.n_splits,
            strata=self.cfg.strata,
            seed=self.cfg.seed,
            repeats=self.cfg.repeats,
        )
