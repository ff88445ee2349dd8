from .resampling import LastFit, fit_resamples, last_fit, run_resampling
from .tuning import finalize_workflow, tune_grid

__all__ = [
    "fit_resamples",
    "run_resampling",
    "last_fit",
    "LastFit",
    "tune_grid",
    "finalize_workflow",
]
