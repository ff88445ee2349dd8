from __future__ import annotations

"""Preprocessing steps.

Each step is a small immutable description. ``fit`` learns whatever the step
needs from the *training* frame and returns it as a plain dict; ``apply`` uses
only that dict, so a prepared recipe transforms any later frame (assessment
folds, test sets, new data) exactly as it transformed the training data.

When ``columns`` is omitted, a step chooses its own default among the current
predictors (e.g. all nominal predictors for ``dummy``).
"""

import abc
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
from pandas.api import types as ptypes
from pandas.tseries.holiday import USFederalHolidayCalendar

from foldwise.errors import ConfigurationError


def _as_tuple(columns: Any) -> Optional[Tuple[str, ...]]:
    if columns is None:
        return None
    if isinstance(columns, str):
        return (columns,)
    return tuple(columns)


def _slug(text: Any) -> str:
    return re.sub(r"[^0-9A-Za-z]+", "_", str(text)).strip("_")


def is_nominal(series: pd.Series) -> bool:
    return bool(
        ptypes.is_object_dtype(series)
        or isinstance(series.dtype, pd.CategoricalDtype)
        or ptypes.is_bool_dtype(series)
        or ptypes.is_string_dtype(series)
    )


def is_date(series: pd.Series) -> bool:
    return bool(ptypes.is_datetime64_any_dtype(series))


@dataclass(frozen=True)
class Step(abc.ABC):
    """Base class for recipe steps."""

    columns: Optional[Tuple[str, ...]] = None

    kind: ClassVar[str] = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", _as_tuple(self.columns))

    def default_columns(self, frame: pd.DataFrame, predictors: List[str]) -> List[str]:
        return list(predictors)

    def select(self, frame: pd.DataFrame, predictors: List[str]) -> List[str]:
        if self.columns is None:
            return self.default_columns(frame, predictors)
        missing = [c for c in self.columns if c not in frame.columns]
        if missing:
            raise KeyError(f"step {self.kind!r}: column(s) not found: {missing}")
        return list(self.columns)

    @abc.abstractmethod
    def fit(self, frame: pd.DataFrame, predictors: List[str]) -> Dict[str, Any]:
        ...

    @abc.abstractmethod
    def apply(self, frame: pd.DataFrame, state: Mapping[str, Any]) -> pd.DataFrame:
        ...


_DATE_FEATURES = ("dow", "month", "year", "doy", "quarter")


@dataclass(frozen=True)
class StepDate(Step):
    """Derive calendar features from date columns.

    ``dow`` and ``month`` become abbreviated names (nominal, ready for
    ``dummy``); ``year``, ``doy`` and ``quarter`` are integers.
    """

    features: Tuple[str, ...] = ("dow", "month", "year")
    keep_original: bool = True

    kind: ClassVar[str] = "date"

    def __post_init__(self) -> None:
        super().__post_init__()
        feats = _as_tuple(self.features) or ()
        unknown = [f for f in feats if f not in _DATE_FEATURES]
        if unknown:
            raise ConfigurationError(f"step 'date': unknown features {unknown}; known: {list(_DATE_FEATURES)}")
        object.__setattr__(self, "features", feats)

    def default_columns(self, frame, predictors):
        return [c for c in predictors if is_date(frame[c])]

    def fit(self, frame, predictors):
        return {"columns": self.select(frame, predictors)}

    def apply(self, frame, state):
        out = frame.copy()
        for col in state["columns"]:
            dates = pd.to_datetime(out[col])
            for feat in self.features:
                name = f"{col}_{feat}"
                if feat == "dow":
                    out[name] = dates.dt.strftime("%a")
                elif feat == "month":
                    out[name] = dates.dt.strftime("%b")
                elif feat == "year":
                    out[name] = dates.dt.year
                elif feat == "doy":
                    out[name] = dates.dt.dayofyear
                elif feat == "quarter":
                    out[name] = dates.dt.quarter
            if not self.keep_original:
                out = out.drop(columns=[col])
        return out


@dataclass(frozen=True)
class StepHoliday(Step):
    """Binary indicators for US federal holidays on date columns."""

    holidays: Optional[Tuple[str, ...]] = None
    keep_original: bool = True

    kind: ClassVar[str] = "holiday"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "holidays", _as_tuple(self.holidays))

    def default_columns(self, frame, predictors):
        return [c for c in predictors if is_date(frame[c])]

    def _rules(self):
        rules = USFederalHolidayCalendar.rules
        if self.holidays is None:
            return list(rules)
        by_name = {r.name: r for r in rules}
        unknown = [h for h in self.holidays if h not in by_name]
        if unknown:
            raise ConfigurationError(f"step 'holiday': unknown holidays {unknown}; known: {sorted(by_name)}")
        return [by_name[h] for h in self.holidays]

    def fit(self, frame, predictors):
        return {"columns": self.select(frame, predictors), "holidays": [r.name for r in self._rules()]}

    def apply(self, frame, state):
        out = frame.copy()
        rules = [r for r in self._rules() if r.name in set(state["holidays"])]
        for col in state["columns"]:
            dates = pd.to_datetime(out[col]).dt.normalize()
            valid = dates.dropna()
            for rule in rules:
                name = f"{col}_{_slug(rule.name)}"
                if valid.empty:
                    out[name] = 0
                    continue
                days = rule.dates(valid.min(), valid.max())
                out[name] = dates.isin(days).astype(int)
            if not self.keep_original:
                out = out.drop(columns=[col])
        return out


@dataclass(frozen=True)
class StepDummy(Step):
    """Indicator columns for nominal predictors.

    Levels are learned from training data and sorted. With ``one_hot=False``
    the first level is the reference and gets no column. Levels unseen at fit
    time encode as all zeros.
    """

    one_hot: bool = False

    kind: ClassVar[str] = "dummy"

    def default_columns(self, frame, predictors):
        return [c for c in predictors if is_nominal(frame[c])]

    def fit(self, frame, predictors):
        levels: Dict[str, List[Any]] = {}
        for col in self.select(frame, predictors):
            observed = frame[col].dropna().unique().tolist()
            levels[col] = sorted(observed, key=str)
        return {"levels": levels}

    def apply(self, frame, state):
        out = frame.copy()
        for col, levels in state["levels"].items():
            encoded = levels if self.one_hot else levels[1:]
            values = out[col]
            for level in encoded:
                out[f"{col}_{_slug(level)}"] = (values == level).astype(float)
            out = out.drop(columns=[col])
        return out


@dataclass(frozen=True)
class StepZeroVariance(Step):
    """Drop predictors that take a single value in the training data."""

    kind: ClassVar[str] = "zv"

    def fit(self, frame, predictors):
        cols = self.select(frame, predictors)
        return {"drop": [c for c in cols if frame[c].nunique(dropna=False) <= 1]}

    def apply(self, frame, state):
        return frame.drop(columns=[c for c in state["drop"] if c in frame.columns])


@dataclass(frozen=True)
class StepNormalize(Step):
    """Center and scale numeric predictors with training mean and standard deviation."""

    kind: ClassVar[str] = "normalize"

    def default_columns(self, frame, predictors):
        return [
            c
            for c in predictors
            if ptypes.is_numeric_dtype(frame[c]) and not ptypes.is_bool_dtype(frame[c])
        ]

    def fit(self, frame, predictors):
        stats: Dict[str, Tuple[float, float]] = {}
        for col in self.select(frame, predictors):
            values = frame[col].astype(float)
            sd = float(values.std(ddof=1)) if values.size > 1 else 0.0
            # constant column: center only
            stats[col] = (float(values.mean()), sd if np.isfinite(sd) and sd > 0 else 1.0)
        return {"stats": stats}

    def apply(self, frame, state):
        out = frame.copy()
        for col, (mean, sd) in state["stats"].items():
            out[col] = (out[col].astype(float) - mean) / sd
        return out


BUILTIN_STEPS = (StepDate, StepHoliday, StepDummy, StepZeroVariance, StepNormalize)


@dataclass(frozen=True)
class StepRef:
    """A fitted step: the step description plus its learned state."""

    step: Step
    state: Dict[str, Any] = field(default_factory=dict)

    def apply(self, frame: pd.DataFrame) -> pd.DataFrame:
        return self.step.apply(frame, self.state)
