"""Exception types raised by foldwise.

Partitioning failures (bad fraction, bad fold count, under-populated strata)
are fatal to the call that raised them. Fold-level failures carry the fold id
and the parameter combination being evaluated so a caller can reproduce a
single failing fit without re-running a whole search.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FoldwiseError(Exception):
    """Base class for all foldwise errors."""


class ConfigurationError(FoldwiseError, ValueError):
    """Raised for unknown registry keys or invalid step/metric configuration."""


class SplitError(FoldwiseError, ValueError):
    """Raised when a dataset cannot be partitioned as requested."""


class InvalidFractionError(SplitError):
    """Raised when a training fraction lies outside the open interval (0, 1)."""


class InvalidFoldCountError(SplitError):
    """Raised when the fold count is below 2 or above the number of rows."""


class EmptyCategoryError(SplitError):
    """Raised when a stratum is too small to appear on every side of a partition."""

    def __init__(self, message: str, *, category: Any = None, count: Optional[int] = None):
        super().__init__(message)
        self.category = category
        self.count = count


class FoldError(FoldwiseError):
    """A failure scoped to a single resampling fold."""

    def __init__(
        self,
        message: str,
        *,
        fold_id: Optional[int] = None,
        repeat: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.fold_id = fold_id
        self.repeat = repeat
        self.params = dict(params) if params else {}

    def with_params(self, params: Dict[str, Any]) -> "FoldError":
        """Attach the parameter combination under evaluation (used by grid search)."""
        self.params = dict(params)
        return self

    def __str__(self) -> str:
        base = super().__str__()
        ctx = []
        if self.repeat is not None:
            ctx.append(f"repeat={self.repeat}")
        if self.fold_id is not None:
            ctx.append(f"fold={self.fold_id}")
        if self.params:
            ctx.append(f"params={self.params!r}")
        return f"{base} ({', '.join(ctx)})" if ctx else base


class FitError(FoldError):
    """Raised when the fit function fails on an analysis set."""


class FitTimeoutError(FoldError):
    """Raised when a single fit exceeds the configured timeout."""


class MetricUndefinedError(FoldwiseError, ValueError):
    """Raised when a metric cannot be computed for degenerate predictions."""

    def __init__(self, message: str, *, metric: Optional[str] = None, fold_id: Optional[int] = None):
        super().__init__(message)
        self.metric = metric
        self.fold_id = fold_id


class EmptyGridError(FoldwiseError, ValueError):
    """Raised when a best candidate is requested from an empty parameter grid."""
