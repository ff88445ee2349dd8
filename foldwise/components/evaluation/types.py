from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from foldwise.components.splitters.types import Fold


@dataclass
class FoldOutcome:
    """Scores of one successfully evaluated fold (MetricResult)."""

    fold: Fold
    scores: Dict[str, Optional[float]] = field(default_factory=dict)
    undefined: Dict[str, str] = field(default_factory=dict)
    train_scores: Optional[Dict[str, Optional[float]]] = None
