from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np

from foldwise.contracts.results import FoldRecord, MetricSummary

from .types import FoldOutcome


def _mean_std(values: Sequence[Optional[float]]) -> tuple[Optional[float], Optional[float], int]:
    defined = np.asarray([v for v in values if v is not None], dtype=float)
    if defined.size == 0:
        return None, None, 0
    return float(np.mean(defined)), float(np.std(defined)), int(defined.size)


def summarize_metrics(
    outcomes: Sequence[FoldOutcome],
    metric_names: Sequence[str],
    *,
    return_train_score: bool = False,
) -> Dict[str, MetricSummary]:
    """Arithmetic mean per metric over the folds where it is defined."""
    out: Dict[str, MetricSummary] = {}
    for name in metric_names:
        values = [o.scores.get(name) for o in outcomes]
        mean, std, n = _mean_std(values)

        train_mean = None
        train_values = None
        if return_train_score:
            train_values = [(o.train_scores or {}).get(name) for o in outcomes]
            train_mean, _, _ = _mean_std(train_values)

        out[name] = MetricSummary(
            name=name,
            mean=mean,
            std=std,
            n=n,
            values=values,
            train_mean=train_mean,
            train_values=train_values,
        )
    return out


def fold_records(outcomes: Sequence[FoldOutcome]) -> List[FoldRecord]:
    return [
        FoldRecord(
            fold_id=o.fold.fold_id,
            repeat=o.fold.repeat,
            n_analysis=o.fold.n_analysis,
            n_assessment=o.fold.n_assessment,
            scores=dict(o.scores),
            train_scores=dict(o.train_scores) if o.train_scores is not None else None,
            undefined=dict(o.undefined),
        )
        for o in outcomes
    ]
