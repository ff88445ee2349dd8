from __future__ import annotations

from typing import Optional

from foldwise.components.evaluation.evaluator import Evaluator, MetricsArg
from foldwise.contracts.eval_configs import EvalModel


def make_evaluator(
    cfg: Optional[EvalModel] = None,
    *,
    outcome: str,
    metrics: Optional[MetricsArg] = None,
) -> Evaluator:
    """Build an :class:`Evaluator`; explicit ``metrics`` override ``cfg.metrics``."""
    return Evaluator.from_config(cfg or EvalModel(), outcome=outcome, metrics=metrics)
