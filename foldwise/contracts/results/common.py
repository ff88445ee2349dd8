from __future__ import annotations

"""Result contracts.

These models represent *outputs* of resampling and tuning runs.

Design goals:
- JSON-friendly field types (lists, dicts, scalars) at the contract boundary.
- Strict top-level validation (extra fields forbidden) to prevent silent drift.
- Non-finite floats are normalised to ``None`` so reports serialise cleanly.

Note: contracts should only depend on stdlib + pydantic.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict


class ResultModel(BaseModel):
    """Base class for result contracts (strict by default)."""

    model_config = ConfigDict(extra="forbid")


JSONDict = Dict[str, Any]


def finite_or_none(v: Any) -> Optional[float]:
    if v is None:
        return None
    try:
        fv = float(v)
    except (TypeError, ValueError):
        return None
    return fv if math.isfinite(fv) else None


def sanitize_floats(values: Iterable[Any]) -> List[Optional[float]]:
    return [finite_or_none(v) for v in values]


def json_safe_params(params: Dict[str, Any]) -> JSONDict:
    """Make parameter values JSON-friendly (numpy scalars -> python, others -> repr)."""
    out: JSONDict = {}
    for k, v in params.items():
        if hasattr(v, "item") and callable(v.item):
            v = v.item()
        if v is None or isinstance(v, (bool, int, float, str)):
            out[str(k)] = v
        else:
            out[str(k)] = repr(v)
    return out
