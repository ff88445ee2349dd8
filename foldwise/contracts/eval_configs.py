from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

FoldErrorPolicy = Literal["abort", "skip"]


class EvalModel(BaseModel):
    metrics: List[str] = Field(default_factory=lambda: ["accuracy"])
    seed: Optional[int] = None
    # 1 = sequential; folds run on a thread pool otherwise
    n_jobs: int = Field(default=1, ge=1)
    # seconds per fit; None disables the timeout
    fit_timeout: Optional[float] = Field(default=None, gt=0)
    on_fold_error: FoldErrorPolicy = "abort"
    return_train_score: bool = False

    @field_validator("metrics")
    @classmethod
    def _non_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one metric is required")
        return v
