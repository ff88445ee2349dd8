from __future__ import annotations

import logging
from typing import Any, List, Optional

import numpy as np

from foldwise.core.frames import as_index, coerce_frame, strata_codes
from foldwise.errors import InvalidFoldCountError
from foldwise.runtime.random.rng import RngManager

from .allocation import deal_round_robin
from .types import Fold

logger = logging.getLogger(__name__)


def _check_fold_count(v: Any, n_rows: int) -> int:
    if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
        raise InvalidFoldCountError(f"v must be an integer; got {v!r}")
    v = int(v)
    if v < 2 or v > n_rows:
        raise InvalidFoldCountError(f"v must be between 2 and the number of rows ({n_rows}); got {v}")
    return v


def assign_groups(
    n_rows: int,
    v: int,
    *,
    codes: Optional[np.ndarray] = None,
    rng: np.random.Generator,
    rngm: Optional[RngManager] = None,
) -> np.ndarray:
    """Return the fold group (0..v-1) of every row.

    Rows are permuted and dealt round-robin. With ``codes`` each category is
    permuted on its own stream (``rngm``) and dealing resumes where the
    previous category stopped, which keeps both fold sizes and per-fold
    category counts within one row of each other.
    """
    groups = np.empty(n_rows, dtype=int)
    if codes is None:
        perm = rng.permutation(n_rows)
        groups[perm] = deal_round_robin(n_rows, v)
        return groups

    if rngm is None:
        raise ValueError("assign_groups needs an RngManager when stratifying")

    # a random starting fold avoids always handing the first fold the extra rows
    start = int(rng.integers(v))
    for code in range(int(codes.max()) + 1):
        members = np.flatnonzero(codes == code)
        if members.size == 0:
            continue
        perm = rngm.child_generator(f"stratum{code}").permutation(members)
        groups[perm] = deal_round_robin(members.size, v, start=start)
        start = (start + members.size) % v
    return groups


def make_folds(
    data: Any,
    v: int = 10,
    *,
    strata: Optional[str] = None,
    seed: Optional[int] = None,
    repeats: int = 1,
) -> List[Fold]:
    """V-fold cross-validation.

    Every row lands in exactly one assessment set per repeat; fold ``i``'s
    analysis set is every other row. Folds come back ordered by
    ``(repeat, fold_id)``.

    Raises
    ------
    InvalidFoldCountError
        If ``v`` is not an integer in ``[2, n_rows]`` or ``repeats < 1``.
    """
    frame = coerce_frame(data)
    n_rows = len(frame)
    v = _check_fold_count(v, n_rows)
    if int(repeats) < 1:
        raise InvalidFoldCountError(f"repeats must be >= 1; got {repeats}")

    codes = None
    if strata is not None:
        codes, categories = strata_codes(frame, strata)
        counts = np.bincount(codes, minlength=len(categories))
        small = [cat for cat, cnt in zip(categories, counts) if cnt < v]
        if small:
            logger.warning(
                "Stratum %r: categories %s have fewer than %d rows; some assessment sets will not contain them.",
                strata,
                list(small),
                v,
            )

    root = RngManager(seed)
    all_rows = np.arange(n_rows, dtype=int)
    folds: List[Fold] = []

    for repeat in range(1, int(repeats) + 1):
        stream = root if repeat == 1 else root.child(f"repeat{repeat}")
        groups = assign_groups(
            n_rows,
            v,
            codes=codes,
            rng=stream.child_generator("folds"),
            rngm=stream,
        )
        for g in range(v):
            in_fold = groups == g
            folds.append(
                Fold(
                    data=frame,
                    fold_id=g + 1,
                    analysis_idx=as_index(all_rows[~in_fold]),
                    assessment_idx=as_index(all_rows[in_fold]),
                    seed=root.fold_seed(g + 1, repeat),
                    repeat=repeat,
                )
            )
    return folds
