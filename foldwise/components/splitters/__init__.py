from .holdout import split
from .kfold import make_folds
from .types import Fold, Split

__all__ = ["split", "make_folds", "Split", "Fold"]
