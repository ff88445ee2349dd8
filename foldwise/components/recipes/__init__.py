from .recipe import PreparedRecipe, Recipe
from .steps import Step, StepDate, StepDummy, StepHoliday, StepNormalize, StepZeroVariance

__all__ = [
    "Recipe",
    "PreparedRecipe",
    "Step",
    "StepDate",
    "StepDummy",
    "StepHoliday",
    "StepNormalize",
    "StepZeroVariance",
]
