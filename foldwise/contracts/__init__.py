from .eval_configs import EvalModel, FoldErrorPolicy
from .recipe_configs import RecipeStepModel
from .split_configs import SplitCVModel, SplitHoldoutModel
from .tuning_configs import GridSearchConfig

__all__ = [
    "EvalModel",
    "FoldErrorPolicy",
    "RecipeStepModel",
    "SplitCVModel",
    "SplitHoldoutModel",
    "GridSearchConfig",
]
