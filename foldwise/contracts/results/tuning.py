from __future__ import annotations

from typing import Optional

from .common import JSONDict, ResultModel
from .resampling import AggregateReport


class GridSearchEntry(ResultModel):
    rank: int
    # position in grid enumeration order (0-based)
    index: int
    params: JSONDict
    metric: str
    mean: Optional[float] = None
    report: AggregateReport
