"""
Resampled evaluation unit tests.
"""
import time

import numpy as np
import pytest

from foldwise import errors
from foldwise.components.evaluation import Evaluator, evaluate
from foldwise.components.splitters import make_folds
from foldwise.contracts import EvalModel


def memorize(analysis):
    """Model that remembers every training row's label by id."""
    return dict(zip(analysis['id'], analysis['y']))


def recall(model, predictors):
    """Look rows up by id; unseen rows get the constant guess 'a'."""
    return np.asarray([model.get(i, 'a') for i in predictors['id']])


def failing_on(row_id, exc=RuntimeError('boom')):
    """Fit function that fails for the fold whose analysis set lacks ``row_id``."""

    def fit(analysis):
        if row_id not in set(analysis['id']):
            raise exc
        return memorize(analysis)

    return fit


def undefined_metric(predictions, truth):
    raise errors.MetricUndefinedError('never defined')


class TestEvaluate:
    """Evaluator tests."""

    def test_report(self, balanced):
        """One record per fold and one summary per metric."""
        folds = make_folds(balanced, 5, strata='y', seed=1)
        report = evaluate(folds, memorize, recall, ['accuracy'], outcome='y')
        assert report.n_folds == 5
        assert [r.fold_id for r in report.folds] == [1, 2, 3, 4, 5]
        summary = report.metrics['accuracy']
        assert summary.n == 5
        assert len(summary.values) == 5
        assert summary.mean == pytest.approx(np.mean(summary.values))
        assert summary.std == pytest.approx(np.std(summary.values))

    def test_no_leakage(self, balanced):
        """Fit sees analysis rows only; predict never sees the outcome."""
        folds = make_folds(balanced, 5, strata='y', seed=1)
        seen_fit = []
        seen_predict = []

        def fit(analysis):
            seen_fit.append(set(analysis['id']))
            return memorize(analysis)

        def predict(model, predictors):
            seen_predict.append(list(predictors.columns))
            return recall(model, predictors)

        evaluate(folds, fit, predict, ['accuracy'], outcome='y')
        for fold, ids in zip(folds, seen_fit):
            assert not ids & set(fold.assessment()['id'])
            assert ids == set(fold.analysis()['id'])
        assert all('y' not in cols for cols in seen_predict)

    def test_memorizing_model(self, balanced):
        """Self-evaluation is perfect for a memorizing model, held-out scores are not."""
        folds = make_folds(balanced, 5, strata='y', seed=1)
        report = evaluate(folds, memorize, recall, ['accuracy'], outcome='y', return_train_score=True)
        summary = report.metrics['accuracy']
        assert summary.train_mean == 1.0
        # unseen rows get 'a', so about half of every stratified assessment set is wrong
        assert summary.mean == pytest.approx(0.5)
        assert summary.train_mean > summary.mean

    def test_seed_passed(self, balanced):
        """A fit function with a seed keyword receives the fold seed."""
        folds = make_folds(balanced, 4, seed=6)
        seeds = []

        def fit(analysis, seed=None):
            seeds.append(seed)
            return memorize(analysis)

        evaluate(folds, fit, recall, ['accuracy'], outcome='y')
        assert seeds == [f.seed for f in folds]

    def test_fit_error_abort(self, balanced):
        """The failing fold is reported with its id and the original cause."""
        folds = make_folds(balanced, 5, seed=1)
        failing = next(f.fold_id for f in folds if 0 in set(f.assessment()['id']))
        with pytest.raises(errors.FitError) as caught:
            evaluate(folds, failing_on(0), recall, ['accuracy'], outcome='y')
        assert caught.value.fold_id == failing
        assert isinstance(caught.value.__cause__, RuntimeError)
        assert f'fold={failing}' in str(caught.value)

    def test_fit_error_skip(self, balanced):
        """Skipped folds are left out of the aggregate and listed."""
        folds = make_folds(balanced, 5, seed=1)
        failing = next(f.fold_id for f in folds if 0 in set(f.assessment()['id']))
        report = evaluate(folds, failing_on(0), recall, ['accuracy'], outcome='y', on_fold_error='skip')
        assert report.n_folds == 4
        assert [s.fold_id for s in report.skipped] == [failing]
        assert report.skipped[0].error_type == 'FitError'
        assert report.metrics['accuracy'].n == 4
        assert any('skipped' in n for n in report.notes)

    def test_all_folds_skipped(self, balanced):
        """A run where every fold fails still returns a report."""
        folds = make_folds(balanced, 3, seed=1)

        def fit(analysis):
            raise ValueError('bad')

        report = evaluate(folds, fit, recall, ['accuracy'], outcome='y', on_fold_error='skip')
        assert report.n_folds == 0
        assert len(report.skipped) == 3
        assert report.mean('accuracy') is None

    def test_fit_timeout(self, balanced):
        """A slow fit fails its own fold only."""
        folds = make_folds(balanced, 4, seed=1)
        slow = next(f.fold_id for f in folds if 0 in set(f.assessment()['id']))

        def fit(analysis):
            if 0 not in set(analysis['id']):
                time.sleep(1.0)
            return memorize(analysis)

        report = evaluate(
            folds, fit, recall, ['accuracy'], outcome='y', fit_timeout=0.2, on_fold_error='skip'
        )
        assert [s.fold_id for s in report.skipped] == [slow]
        assert report.skipped[0].error_type == 'FitTimeoutError'
        assert report.n_folds == 3

    def test_fit_timeout_abort(self, balanced):
        """Under the abort policy the timeout error is raised."""
        folds = make_folds(balanced, 4, seed=1)

        def fit(analysis):
            time.sleep(1.0)
            return memorize(analysis)

        with pytest.raises(errors.FitTimeoutError):
            evaluate(folds, fit, recall, ['accuracy'], outcome='y', fit_timeout=0.1)

    def test_predict_error(self, balanced):
        """Predict failures are fold errors."""
        folds = make_folds(balanced, 3, seed=1)

        def predict(model, predictors):
            raise KeyError('gone')

        with pytest.raises(errors.FoldError):
            evaluate(folds, memorize, predict, ['accuracy'], outcome='y')

    def test_undefined_metric(self, balanced):
        """An undefined metric is recorded as missing and evaluation goes on."""
        folds = make_folds(balanced, 4, seed=1)
        report = evaluate(
            folds, memorize, recall, {'accuracy': _accuracy, 'never': undefined_metric}, outcome='y'
        )
        assert report.mean('never') is None
        assert report.values('never') == [None] * 4
        assert report.metrics['never'].n == 0
        assert report.mean('accuracy') is not None
        assert all('never' in r.undefined for r in report.folds)
        assert len([n for n in report.notes if 'never undefined' in n]) == 4

    def test_parallel_matches_sequential(self, balanced):
        """Thread-pooled folds give the same report as sequential ones."""
        folds = make_folds(balanced, 8, strata='y', seed=4)

        def fit(analysis, seed=None):
            return seed

        def predict(model, predictors):
            return np.random.default_rng(model).choice(['a', 'b'], size=len(predictors))

        sequential = evaluate(folds, fit, predict, ['accuracy', 'kap'], outcome='y', n_jobs=1)
        parallel = evaluate(folds, fit, predict, ['accuracy', 'kap'], outcome='y', n_jobs=4)
        assert parallel.model_dump() == sequential.model_dump()

    def test_parallel_abort_in_fold_order(self, balanced):
        """With threads, the first failing fold in fold order is raised."""
        folds = make_folds(balanced, 5, seed=1)

        def fit(analysis):
            raise RuntimeError('always')

        with pytest.raises(errors.FitError) as caught:
            evaluate(folds, fit, recall, ['accuracy'], outcome='y', n_jobs=3)
        assert caught.value.fold_id == 1

    def test_progress(self, balanced, recorder):
        """Progress goes init, one update per fold, finalize."""
        folds = make_folds(balanced, 4, seed=1)
        evaluate(folds, memorize, recall, ['accuracy'], outcome='y', progress=recorder)
        assert recorder.calls[0] == ('init', 4, 'resamples')
        assert [c[1] for c in recorder.calls if c[0] == 'update'] == [1, 2, 3, 4]
        assert recorder.calls[-1] == ('finalize', 'resamples')

    def test_params_in_report(self, balanced):
        """Parameters passed along are recorded on the report."""
        folds = make_folds(balanced, 3, seed=1)
        report = evaluate(folds, memorize, recall, ['accuracy'], outcome='y', params={'depth': np.int64(3)})
        assert report.params == {'depth': 3}

    def test_no_folds(self):
        """An empty fold list is rejected."""
        with pytest.raises(ValueError):
            evaluate([], memorize, recall, ['accuracy'], outcome='y')

    def test_missing_outcome(self, balanced):
        """The outcome column must exist."""
        folds = make_folds(balanced, 3, seed=1)
        with pytest.raises(KeyError):
            evaluate(folds, memorize, recall, ['accuracy'], outcome='label')

    def test_unknown_metric(self):
        """Unknown metric names fail fast."""
        with pytest.raises(errors.ConfigurationError):
            Evaluator(metrics=['nope'], outcome='y')


class TestFromConfig:
    """Config driven evaluator tests."""

    def test_from_config(self):
        """Config fields map onto the evaluator."""
        cfg = EvalModel(metrics=['accuracy', 'kap'], n_jobs=2, on_fold_error='skip', return_train_score=True)
        evaluator = Evaluator.from_config(cfg, outcome='y')
        assert evaluator.metric_names == ['accuracy', 'kap']
        assert evaluator.n_jobs == 2
        assert evaluator.on_fold_error == 'skip'
        assert evaluator.return_train_score

    def test_explicit_metrics_win(self):
        """Metrics passed explicitly override the config."""
        evaluator = Evaluator.from_config(EvalModel(), outcome='y', metrics=['rmse'])
        assert evaluator.metric_names == ['rmse']


def _accuracy(predictions, truth):
    return float(np.mean(np.asarray(predictions) == np.asarray(truth)))
