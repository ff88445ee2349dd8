"""Public foldwise API.

This module is the **stable public surface** for splitting, resampling and tuning.

Prefer importing from here instead of reaching into internal subpackages:

    from foldwise.api import split, make_folds, evaluate

The underlying implementations live under :mod:`foldwise.components` and
:mod:`foldwise.use_cases`.
"""

from __future__ import annotations

from foldwise.components.evaluation import Evaluator, evaluate, list_metrics, metric_set, roc_curve
from foldwise.components.recipes import Recipe
from foldwise.components.splitters import Fold, Split, make_folds, split
from foldwise.components.tuning import GridSearch, search
from foldwise.components.workflows import Workflow
from foldwise.use_cases import (
    LastFit,
    finalize_workflow,
    fit_resamples,
    last_fit,
    run_resampling,
    tune_grid,
)

# Non-use-case helpers that are still part of the stable public surface.
from foldwise.core.progress import ProgressCallback
from foldwise.contracts.results import AggregateReport, GridSearchEntry
from foldwise.factories.split_factory import make_splitter
from foldwise.registries.models import model_spec

__all__ = [
    "split",
    "make_folds",
    "evaluate",
    "search",
    "Split",
    "Fold",
    "Evaluator",
    "GridSearch",
    "Recipe",
    "Workflow",
    "model_spec",
    "metric_set",
    "list_metrics",
    "roc_curve",
    "fit_resamples",
    "run_resampling",
    "tune_grid",
    "finalize_workflow",
    "last_fit",
    "LastFit",
    "make_splitter",
    "ProgressCallback",
    "AggregateReport",
    "GridSearchEntry",
]
