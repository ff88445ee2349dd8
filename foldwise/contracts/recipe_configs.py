from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class RecipeStepModel(BaseModel):
    """A tagged preprocessing step: ``kind`` selects the step, the rest are its options."""

    model_config = ConfigDict(extra="allow")

    kind: str
    columns: Optional[List[str]] = None

    def options(self) -> dict:
        return self.model_dump(exclude={"kind"}, exclude_none=True)
