from __future__ import annotations

"""Recipes: an outcome, column roles, and an ordered list of preprocessing steps.

``Recipe`` is a pure description. :meth:`Recipe.prep` fits every step, in
order, on training data only and returns a :class:`PreparedRecipe`, whose
:meth:`~PreparedRecipe.bake` replays the fitted steps on any frame.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd

from foldwise.core.frames import require_columns

from .steps import Step, StepRef

logger = logging.getLogger(__name__)

PREDICTOR = "predictor"
OUTCOME = "outcome"


@dataclass(frozen=True, eq=False)
class Recipe:
    outcome: str
    steps: Tuple[Step, ...] = ()
    # column -> role; anything other than "predictor" keeps the column out of the model
    roles: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        outcome: str,
        steps: Iterable[Any] = (),
        roles: Mapping[str, str] | None = None,
    ) -> "Recipe":
        from foldwise.registries.recipe_steps import make_step

        return cls(outcome=outcome, steps=tuple(make_step(s) for s in steps), roles=dict(roles or {}))

    def add_step(self, step: Step) -> "Recipe":
        return replace(self, steps=self.steps + (step,))

    def update_role(self, *columns: str, role: str = "ID") -> "Recipe":
        roles = dict(self.roles)
        for c in columns:
            roles[c] = role
        return replace(self, roles=roles)

    def non_predictors(self) -> List[str]:
        return [self.outcome] + [c for c, r in self.roles.items() if r != PREDICTOR]

    def predictors_of(self, frame: pd.DataFrame) -> List[str]:
        excluded = set(self.non_predictors())
        return [c for c in frame.columns if c not in excluded]

    def summary(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Variable/type/role table for ``frame``."""
        rows = []
        for c in frame.columns:
            role = OUTCOME if c == self.outcome else self.roles.get(c, PREDICTOR)
            rows.append({"variable": c, "type": str(frame[c].dtype), "role": role})
        return pd.DataFrame(rows, columns=["variable", "type", "role"])

    def prep(self, training: pd.DataFrame) -> "PreparedRecipe":
        require_columns(training, self.outcome)
        frame = training
        predictors = self.predictors_of(frame)
        fitted: List[StepRef] = []
        for step in self.steps:
            state = step.fit(frame, predictors)
            ref = StepRef(step=step, state=state)
            frame = ref.apply(frame)
            predictors = self.predictors_of(frame)
            fitted.append(ref)
        logger.debug("Prepared recipe with %d step(s); %d predictor(s)", len(fitted), len(predictors))
        return PreparedRecipe(recipe=self, fitted=tuple(fitted), predictors=tuple(predictors))


@dataclass(frozen=True, eq=False)
class PreparedRecipe:
    recipe: Recipe
    fitted: Tuple[StepRef, ...]
    predictors: Tuple[str, ...]

    @property
    def outcome(self) -> str:
        return self.recipe.outcome

    def bake(self, new_data: pd.DataFrame) -> pd.DataFrame:
        frame = new_data
        for ref in self.fitted:
            frame = ref.apply(frame)
        return frame

    def predictor_frame(self, new_data: pd.DataFrame) -> pd.DataFrame:
        """Baked predictors in training column order, ready for an estimator."""
        baked = self.bake(new_data)
        missing = [c for c in self.predictors if c not in baked.columns]
        if missing:
            raise KeyError(f"Baked data lacks predictor column(s) {missing}")
        return baked.loc[:, list(self.predictors)]

    def outcome_values(self, data: pd.DataFrame) -> Sequence[Any]:
        require_columns(data, self.outcome)
        return data[self.outcome].to_numpy()

    def state(self) -> List[Dict[str, Any]]:
        return [{"kind": ref.step.kind, **ref.state} for ref in self.fitted]
