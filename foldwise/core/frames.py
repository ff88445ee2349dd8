from __future__ import annotations

"""Public dataset coercion helpers.

Conventions
-----------
- A dataset is a ``pandas.DataFrame``; records (list of dicts) are accepted and
  converted once at the boundary.
- Row identity is positional. Index sets are 1D ``int`` arrays used with
  ``DataFrame.iloc``; the caller's index labels are carried along untouched.
"""

from typing import Any, Sequence, Tuple

import numpy as np
import pandas as pd

from foldwise.errors import SplitError


def coerce_frame(data: Any) -> pd.DataFrame:
    """Return ``data`` as a DataFrame without copying an existing frame."""
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, Sequence) or hasattr(data, "__iter__"):
        return pd.DataFrame(list(data))
    raise TypeError(f"Expected a DataFrame or a sequence of records; got {type(data).__name__}")


def require_columns(data: pd.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise KeyError(f"Column(s) not found in dataset: {missing}")


def as_index(idx: Any) -> np.ndarray:
    """Coerce to a sorted, 1D array of positional row indices."""
    arr = np.asarray(idx, dtype=int).ravel()
    return np.sort(arr, kind="stable")


def take(data: pd.DataFrame, idx: np.ndarray) -> pd.DataFrame:
    return data.iloc[np.asarray(idx, dtype=int)]


def strata_codes(data: pd.DataFrame, column: str) -> Tuple[np.ndarray, np.ndarray]:
    """Encode a strata column as integer codes.

    Categories are numbered in order of first appearance, which fixes the
    tie-break order used by the allocation rules.

    Returns
    -------
    codes : np.ndarray of shape (n_rows,)
    categories : np.ndarray of the distinct values
    """
    require_columns(data, column)
    codes, uniques = pd.factorize(data[column], sort=False)
    if (codes < 0).any():
        raise SplitError(f"Strata column {column!r} contains missing values.")
    return np.asarray(codes, dtype=int), np.asarray(uniques)
