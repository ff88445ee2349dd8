from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class SplitHoldoutModel(BaseModel):
    mode: Literal["holdout"] = "holdout"
    train_frac: float = 0.75
    strata: Optional[str] = None
    seed: Optional[int] = None


class SplitCVModel(BaseModel):
    mode: Literal["kfold"] = "kfold"
    n_splits: int = 10
    repeats: int = Field(default=1, ge=1)
    strata: Optional[str] = None
    seed: Optional[int] = None
