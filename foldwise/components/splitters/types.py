from __future__ import annotations

"""Splitter return contracts.

Splitters never copy the dataset: a :class:`Split` or :class:`Fold` holds a
reference to the caller's frame plus positional index arrays, and subsets are
materialised only when asked for.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from foldwise.core.frames import take


@dataclass(frozen=True, eq=False)
class Split:
    """A single training/test partition of ``data``.

    Notes
    -----
    - ``train_idx`` / ``test_idx`` are sorted positional indices into ``data``.
    - ``strata`` records the column used for stratification (if any).
    """

    data: pd.DataFrame = field(repr=False)
    train_idx: np.ndarray
    test_idx: np.ndarray
    strata: Optional[str] = None
    seed: Optional[int] = None

    def training(self) -> pd.DataFrame:
        return take(self.data, self.train_idx)

    def testing(self) -> pd.DataFrame:
        return take(self.data, self.test_idx)

    @property
    def n_train(self) -> int:
        return int(self.train_idx.shape[0])

    @property
    def n_test(self) -> int:
        return int(self.test_idx.shape[0])

    def as_fold(self, seed: int = 0) -> "Fold":
        """View the split as a single analysis (training) / assessment (test) fold."""
        return Fold(
            data=self.data,
            fold_id=1,
            analysis_idx=self.train_idx,
            assessment_idx=self.test_idx,
            seed=int(seed),
        )

    def __repr__(self) -> str:
        return f"<Training/Testing/Total> <{self.n_train}/{self.n_test}/{len(self.data)}>"


@dataclass(frozen=True, eq=False)
class Fold:
    """One analysis/assessment pair of a v-fold partition.

    ``fold_id`` is 1-based. ``seed`` is derived from the top-level seed and
    the fold's position only, so a fold fits identically whatever thread or
    order it runs in.
    """

    data: pd.DataFrame = field(repr=False)
    fold_id: int
    analysis_idx: np.ndarray
    assessment_idx: np.ndarray
    seed: int
    repeat: int = 1

    def analysis(self) -> pd.DataFrame:
        return take(self.data, self.analysis_idx)

    def assessment(self) -> pd.DataFrame:
        return take(self.data, self.assessment_idx)

    @property
    def n_analysis(self) -> int:
        return int(self.analysis_idx.shape[0])

    @property
    def n_assessment(self) -> int:
        return int(self.assessment_idx.shape[0])

    @property
    def label(self) -> str:
        fold = f"Fold{self.fold_id:02d}"
        return fold if self.repeat == 1 else f"Repeat{self.repeat}/{fold}"

    def __repr__(self) -> str:
        return f"{self.label} <{self.n_analysis}/{self.n_assessment}/{len(self.data)}>"
