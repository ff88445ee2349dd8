from .model_spec import ModelMode, ModelSpec
from .workflow import FittedWorkflow, Workflow

__all__ = ["ModelMode", "ModelSpec", "Workflow", "FittedWorkflow"]
