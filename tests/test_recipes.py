"""
Recipe and preprocessing step unit tests.
"""
import pandas as pd
import pytest

from foldwise import errors
from foldwise.components.recipes import (
    Recipe,
    StepDate,
    StepDummy,
    StepHoliday,
    StepNormalize,
    StepZeroVariance,
)
from foldwise.registries.recipe_steps import list_step_kinds, make_step


@pytest.fixture
def training() -> pd.DataFrame:
    """Small mixed-type training frame."""
    return pd.DataFrame(
        {
            'id': [10, 11, 12, 13],
            'color': ['red', 'green', 'blue', 'green'],
            'size': [1.0, 2.0, 3.0, 2.0],
            'const': [7, 7, 7, 7],
            'y': ['a', 'b', 'a', 'b'],
        }
    )


class TestSteps:
    """Single step tests."""

    def test_dummy_reference_level(self, training):
        """Sorted levels; the first is the reference and gets no column."""
        prepared = Recipe('y', steps=(StepDummy(columns=['color']),)).prep(training)
        baked = prepared.bake(training)
        assert 'color' not in baked.columns
        assert [c for c in baked.columns if c.startswith('color_')] == ['color_green', 'color_red']
        assert baked['color_green'].tolist() == [0.0, 1.0, 0.0, 1.0]

    def test_dummy_one_hot(self, training):
        """one_hot keeps every level."""
        baked = Recipe('y', steps=(StepDummy(columns='color', one_hot=True),)).prep(training).bake(training)
        assert {'color_blue', 'color_green', 'color_red'} <= set(baked.columns)

    def test_dummy_unseen_level(self, training):
        """Levels not seen in training encode as zeros."""
        prepared = Recipe('y', steps=(StepDummy(columns=['color']),)).prep(training)
        baked = prepared.bake(pd.DataFrame({'color': ['purple'], 'y': ['a']}))
        assert baked[['color_green', 'color_red']].iloc[0].tolist() == [0.0, 0.0]

    def test_dummy_default_columns(self, training):
        """Without columns, every nominal predictor is encoded (never the outcome)."""
        prepared = Recipe('y', steps=(StepDummy(),)).prep(training)
        assert prepared.state()[0]['levels'] == {'color': ['blue', 'green', 'red']}

    def test_zero_variance(self, training):
        """Constant predictors are dropped."""
        prepared = Recipe('y', steps=(StepZeroVariance(),)).prep(training)
        assert 'const' not in prepared.predictors
        assert 'const' not in prepared.bake(training).columns

    def test_normalize_uses_training_stats(self, training):
        """Centering and scaling reuse the training mean and deviation."""
        prepared = Recipe('y', steps=(StepNormalize(columns=['size']),)).prep(training)
        mean, sd = prepared.state()[0]['stats']['size']
        assert mean == 2.0
        assert sd == pytest.approx(pd.Series([1.0, 2.0, 3.0, 2.0]).std())
        baked = prepared.bake(pd.DataFrame({'size': [2.0, 2.0 + sd], 'y': ['a', 'b']}))
        assert baked['size'].tolist() == pytest.approx([0.0, 1.0])

    def test_normalize_constant(self, training):
        """A constant column is centered only."""
        prepared = Recipe('y', steps=(StepNormalize(columns=['const']),)).prep(training)
        assert prepared.bake(training)['const'].tolist() == [0.0, 0.0, 0.0, 0.0]

    def test_date(self):
        """Day of week and month become names; year stays numeric."""
        frame = pd.DataFrame({'date': pd.to_datetime(['2024-01-01', '2024-02-03']), 'y': [1, 2]})
        baked = Recipe('y', steps=(StepDate(),)).prep(frame).bake(frame)
        assert baked['date_dow'].tolist() == ['Mon', 'Sat']
        assert baked['date_month'].tolist() == ['Jan', 'Feb']
        assert baked['date_year'].tolist() == [2024, 2024]
        assert 'date' in baked.columns

    def test_date_drop_original(self):
        """keep_original=False removes the date column."""
        frame = pd.DataFrame({'date': pd.to_datetime(['2024-01-01']), 'y': [1]})
        baked = Recipe('y', steps=(StepDate(features=['year'], keep_original=False),)).prep(frame).bake(frame)
        assert list(baked.columns) == ['y', 'date_year']

    def test_date_unknown_feature(self):
        """Unknown calendar features are rejected."""
        with pytest.raises(errors.ConfigurationError):
            StepDate(features=['fortnight'])

    def test_holiday(self):
        """Holiday indicators mark matching dates."""
        frame = pd.DataFrame({'date': pd.to_datetime(['2024-07-04', '2024-07-05']), 'y': [1, 2]})
        baked = Recipe('y', steps=(StepHoliday(holidays=['Independence Day']),)).prep(frame).bake(frame)
        assert baked['date_Independence_Day'].tolist() == [1, 0]

    def test_holiday_unknown(self):
        """Unknown holiday names are rejected at fit time."""
        frame = pd.DataFrame({'date': pd.to_datetime(['2024-07-04']), 'y': [1]})
        with pytest.raises(errors.ConfigurationError):
            Recipe('y', steps=(StepHoliday(holidays=['Pi Day']),)).prep(frame)

    def test_missing_column(self, training):
        """Explicit columns must exist."""
        with pytest.raises(KeyError):
            Recipe('y', steps=(StepDummy(columns=['shape']),)).prep(training)


class TestRecipe:
    """Recipe composition tests."""

    def test_roles(self, training):
        """ID columns stay in the data but are not predictors."""
        recipe = Recipe('y').update_role('id')
        prepared = recipe.prep(training)
        assert 'id' not in prepared.predictors
        assert 'y' not in prepared.predictors
        assert 'id' in prepared.bake(training).columns

    def test_summary(self, training):
        """Summary lists each variable with its role."""
        summary = Recipe('y').update_role('id').summary(training)
        roles = dict(zip(summary['variable'], summary['role']))
        assert roles['id'] == 'ID'
        assert roles['y'] == 'outcome'
        assert roles['size'] == 'predictor'

    def test_immutable(self, training):
        """add_step returns a new recipe."""
        base = Recipe('y')
        extended = base.add_step(StepZeroVariance())
        assert base.steps == ()
        assert len(extended.steps) == 1

    def test_steps_in_order(self, training):
        """Later steps see the output of earlier ones."""
        recipe = Recipe('y').update_role('id').add_step(StepDummy()).add_step(StepZeroVariance())
        prepared = recipe.prep(training)
        assert prepared.predictors == ('size', 'color_green', 'color_red')

    def test_prep_does_not_touch_input(self, training):
        """Prepping and baking never modify the caller's frame."""
        before = training.copy()
        Recipe('y', steps=(StepDummy(), StepNormalize())).prep(training).bake(training)
        pd.testing.assert_frame_equal(training, before)

    def test_predictor_frame(self, training):
        """Predictor frame follows training column order."""
        prepared = Recipe('y').update_role('id').prep(training)
        shuffled = training[['y', 'const', 'size', 'color', 'id']]
        assert list(prepared.predictor_frame(shuffled).columns) == ['color', 'size', 'const']

    def test_from_config(self):
        """Steps are built from tagged dicts."""
        recipe = Recipe.from_config('y', [{'kind': 'dummy', 'one_hot': True}, {'kind': 'zv'}], roles={'id': 'ID'})
        assert isinstance(recipe.steps[0], StepDummy) and recipe.steps[0].one_hot
        assert isinstance(recipe.steps[1], StepZeroVariance)
        assert recipe.roles == {'id': 'ID'}


class TestStepRegistry:
    """Step registry tests."""

    def test_kinds(self):
        """Built-in steps are registered by kind."""
        assert list_step_kinds() == ['date', 'dummy', 'holiday', 'normalize', 'zv']

    def test_make_step_columns(self):
        """Column lists become tuples."""
        step = make_step({'kind': 'normalize', 'columns': ['a', 'b']})
        assert isinstance(step, StepNormalize)
        assert step.columns == ('a', 'b')

    def test_unknown_kind(self):
        """Unknown kinds are configuration errors."""
        with pytest.raises(errors.ConfigurationError):
            make_step({'kind': 'pca'})

    def test_bad_option(self):
        """Unknown options are configuration errors."""
        with pytest.raises(errors.ConfigurationError):
            make_step({'kind': 'zv', 'threshold': 0.1})
