from __future__ import annotations

"""Progress reporting primitives.

Resampling and grid searches can be long-running. Callers may pass any object
implementing :class:`ProgressCallback`; foldwise never depends on a specific UI.
"""

import threading
from typing import Optional, Protocol


class ProgressCallback(Protocol):
    """A minimal progress reporting interface."""

    def init(self, *, total: int, label: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def update(self, *, current: int, label: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def finalize(self, *, label: Optional[str] = None) -> None:  # pragma: no cover
        ...


class ProgressTracker:
    """Thread-safe counter that forwards to an optional :class:`ProgressCallback`."""

    def __init__(self, progress: Optional[ProgressCallback], *, total: int, label: str):
        self._progress = progress
        self._label = label
        self._current = 0
        self._lock = threading.Lock()
        if progress is not None:
            progress.init(total=total, label=label)

    def step(self) -> None:
        if self._progress is None:
            return
        with self._lock:
            self._current += 1
            current = self._current
        self._progress.update(current=current, label=self._label)

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.finalize(label=self._label)
