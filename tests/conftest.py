"""
Shared foldwise test fixtures.
"""
import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def balanced() -> pd.DataFrame:
    """40 rows, two interleaved classes of 20 rows each, with a row id."""
    return pd.DataFrame(
        {
            'id': np.arange(40),
            'x': np.arange(40, dtype=float),
            'y': ['a', 'b'] * 20,
        }
    )


@pytest.fixture
def separable() -> pd.DataFrame:
    """40 rows whose class is fully determined by ``x`` (wide gap between classes)."""
    x = np.concatenate([np.arange(20), np.arange(100, 120)]).astype(float)
    y = ['a'] * 20 + ['b'] * 20
    color = ['red', 'green', 'blue', 'green'] * 10
    return pd.DataFrame({'id': np.arange(40), 'x': x, 'color': color, 'y': y})


class Recorder:
    """Progress callback double that keeps every call."""

    def __init__(self):
        self.calls = []

    def init(self, *, total, label=None):
        self.calls.append(('init', total, label))

    def update(self, *, current, label=None):
        self.calls.append(('update', current, label))

    def finalize(self, *, label=None):
        self.calls.append(('finalize', label))


@pytest.fixture
def recorder() -> Recorder:
    """Progress recorder fixture."""
    return Recorder()
