from __future__ import annotations

"""Deterministic rounding rules shared by the splitters.

Requested fractions rarely divide category counts evenly. Both splitters
resolve the remainders here, with fixed rules:

- totals use round-half-up (``0.5`` always rounds up);
- per-category quotas use the largest-remainder (Hamilton) method, ties
  going to the category seen first in the data;
- round-robin dealing assigns folds for k-fold partitions.
"""

import math
from typing import Sequence

import numpy as np


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def training_size(n_rows: int, train_frac: float) -> int:
    """Number of training rows for ``n_rows`` at ``train_frac``, clamped to [1, n_rows - 1]."""
    n_train = round_half_up(n_rows * train_frac)
    return min(max(n_train, 1), n_rows - 1)


def largest_remainder(counts: Sequence[int], total: int) -> np.ndarray:
    """Apportion ``total`` units across groups proportionally to ``counts``.

    Each group receives ``floor(count * total / sum(counts))``; the units left
    over go one at a time to the groups with the largest fractional remainder.
    Equal remainders are resolved by group position (lower first).
    """
    counts_arr = np.asarray(counts, dtype=int)
    n = int(counts_arr.sum())
    if n == 0:
        return np.zeros_like(counts_arr)

    # exact integer arithmetic; float shares would make ties unstable
    numer = counts_arr * int(total)
    quota = numer // n
    remainder = numer - quota * n

    leftover = int(total) - int(quota.sum())
    if leftover > 0:
        order = np.lexsort((np.arange(counts_arr.size), -remainder))
        quota[order[:leftover]] += 1
    return quota


def stratified_quotas(counts: Sequence[int], n_train: int) -> np.ndarray:
    """Per-category training quotas that keep every category on both sides.

    Callers must have rejected categories with fewer than two members.
    """
    quotas = largest_remainder(counts, n_train)
    counts_arr = np.asarray(counts, dtype=int)
    return np.clip(quotas, 1, counts_arr - 1)


def deal_round_robin(n_items: int, n_groups: int, *, start: int = 0) -> np.ndarray:
    """Group number for each of ``n_items`` dealt in turn, beginning at ``start``."""
    return (np.arange(n_items, dtype=int) + int(start)) % int(n_groups)
