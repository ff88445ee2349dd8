from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class GridSearchConfig(BaseModel):
    """
    Exhaustive search over the Cartesian product of a parameter grid.
    """
    param_grid: Dict[str, List[Any]] = Field(
        default_factory=dict,
        description="param -> candidate values; every combination is evaluated",
    )
    metric: Optional[str] = Field(
        default=None,
        description="Metric used for ranking; defaults to the first evaluated metric",
    )
    # None: take the direction registered for the metric
    maximize: Optional[bool] = None
    n_jobs: int = Field(default=1, ge=1)
