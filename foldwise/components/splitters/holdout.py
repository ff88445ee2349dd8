from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from foldwise.core.frames import as_index, coerce_frame, strata_codes
from foldwise.errors import EmptyCategoryError, InvalidFractionError, SplitError
from foldwise.runtime.random.rng import RngManager

from .allocation import stratified_quotas, training_size
from .types import Split

logger = logging.getLogger(__name__)


def _check_fraction(train_frac: float) -> float:
    try:
        frac = float(train_frac)
    except (TypeError, ValueError) as exc:
        raise InvalidFractionError(f"train_frac must be a number; got {train_frac!r}") from exc
    if not (0.0 < frac < 1.0):
        raise InvalidFractionError(f"train_frac must be in (0, 1); got {frac}")
    return frac


def split(
    data: Any,
    train_frac: float = 0.75,
    *,
    strata: Optional[str] = None,
    seed: Optional[int] = None,
) -> Split:
    """Partition ``data`` into a training and a test set.

    Parameters
    ----------
    data : DataFrame or sequence of records
        The full dataset. It is not copied or modified.
    train_frac : float
        Share of rows that go to training, strictly between 0 and 1.
    strata : str, optional
        Column whose category proportions must be preserved on both sides.
    seed : int, optional
        Root seed; the same seed and inputs always give the same split.

    Raises
    ------
    InvalidFractionError
        If ``train_frac`` is outside (0, 1).
    EmptyCategoryError
        If a category of ``strata`` has fewer than two rows.
    SplitError
        If the dataset has fewer than two rows.
    """
    frac = _check_fraction(train_frac)
    frame = coerce_frame(data)
    n_rows = len(frame)
    if n_rows < 2:
        raise SplitError(f"Cannot split a dataset with {n_rows} row(s).")

    rngm = RngManager(seed)
    n_train = training_size(n_rows, frac)

    if strata is None:
        perm = rngm.child_generator("split").permutation(n_rows)
        train_idx, test_idx = perm[:n_train], perm[n_train:]
    else:
        train_idx, test_idx = _stratified(frame, strata, n_train, rngm)

    return Split(
        data=frame,
        train_idx=as_index(train_idx),
        test_idx=as_index(test_idx),
        strata=strata,
        seed=seed,
    )


def _stratified(frame, strata: str, n_train: int, rngm: RngManager):
    codes, categories = strata_codes(frame, strata)
    counts = np.bincount(codes, minlength=len(categories))

    for category, count in zip(categories, counts):
        if count < 2:
            raise EmptyCategoryError(
                f"Category {category!r} of {strata!r} has {count} row(s); "
                "at least 2 are needed to appear in both training and test sets.",
                category=category,
                count=int(count),
            )

    quotas = stratified_quotas(counts, n_train)
    if int(quotas.sum()) != n_train:
        logger.debug("Stratified quotas total %d rows instead of %d", int(quotas.sum()), n_train)

    train_parts = []
    test_parts = []
    for code, quota in enumerate(quotas):
        members = np.flatnonzero(codes == code)
        perm = rngm.child_generator(f"split/stratum{code}").permutation(members)
        train_parts.append(perm[:quota])
        test_parts.append(perm[quota:])

    return np.concatenate(train_parts), np.concatenate(test_parts)
