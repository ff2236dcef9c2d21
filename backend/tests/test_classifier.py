"""
Tests for the reorder classifier capability.

Keras-backed tests are skipped when TensorFlow is not installed.
"""

import numpy as np
import pytest

from core.config import Settings
from ml.classifier import KerasReorderClassifier, ReorderClassifier, classifier_session
from tests.stubs import StubClassifier


@pytest.fixture
def quick_settings():
    return Settings(epochs=5, fetch_delay_seconds=0.0, log_every_n_epochs=2)


@pytest.fixture
def separable_data():
    rng = np.random.default_rng(0)
    X = rng.random((60, 3))
    y = (X[:, 0] < 0.4).astype(np.int64)
    return X, y


class TestClassifierSession:
    def test_closes_on_success(self):
        stub = StubClassifier([0.2])
        with classifier_session(lambda: stub) as clf:
            assert clf is stub
        assert stub.closed is True

    def test_closes_on_failure(self):
        stub = StubClassifier([0.2])
        with pytest.raises(RuntimeError):
            with classifier_session(lambda: stub):
                raise RuntimeError("mid-run")
        assert stub.closed is True

    def test_keras_classifier_satisfies_protocol(self, quick_settings):
        assert isinstance(KerasReorderClassifier(quick_settings), ReorderClassifier)

    def test_stub_satisfies_protocol(self):
        assert isinstance(StubClassifier([]), ReorderClassifier)


class TestKerasReorderClassifier:
    @pytest.fixture(autouse=True)
    def _needs_tensorflow(self):
        pytest.importorskip("tensorflow")

    def test_predict_before_train_raises(self, quick_settings):
        clf = KerasReorderClassifier(quick_settings)
        with pytest.raises(RuntimeError, match="not been trained"):
            clf.predict(np.zeros((2, 3)))

    def test_probabilities_bounded_and_ordered(self, quick_settings, separable_data):
        X, y = separable_data
        with classifier_session(lambda: KerasReorderClassifier(quick_settings)) as clf:
            clf.train(X, y)
            probabilities = clf.predict(X)
            accuracy = clf.evaluate(X, y)

        assert probabilities.shape == (60,)
        assert np.all((probabilities >= 0.0) & (probabilities <= 1.0))
        assert 0.0 <= accuracy <= 1.0

    def test_observer_called_every_epoch(self, quick_settings, separable_data):
        X, y = separable_data
        seen = []
        with classifier_session(lambda: KerasReorderClassifier(quick_settings)) as clf:
            clf.train(X, y, observer=lambda epoch, loss: seen.append((epoch, loss)))

        assert [epoch for epoch, _ in seen] == [0, 1, 2, 3, 4]
        assert all(isinstance(loss, float) for _, loss in seen)

    def test_training_does_not_mutate_inputs(self, quick_settings, separable_data):
        X, y = separable_data
        X_before, y_before = X.copy(), y.copy()
        with classifier_session(lambda: KerasReorderClassifier(quick_settings)) as clf:
            clf.train(X, y)
        np.testing.assert_array_equal(X, X_before)
        np.testing.assert_array_equal(y, y_before)

    def test_length_mismatch_rejected(self, quick_settings):
        clf = KerasReorderClassifier(quick_settings)
        with pytest.raises(ValueError, match="mismatch"):
            clf.train(np.zeros((3, 3)), np.zeros(2))

    def test_close_is_idempotent(self, quick_settings, separable_data):
        X, y = separable_data
        clf = KerasReorderClassifier(quick_settings)
        clf.train(X, y)
        clf.close()
        clf.close()
        with pytest.raises(RuntimeError):
            clf.predict(X)

    def test_full_pipeline_with_keras(self, rng):
        from ml.pipeline import RunStatus, run_pipeline

        settings = Settings(epochs=10, fetch_delay_seconds=0.0)
        ctx = run_pipeline(100, rng=rng, settings=settings)

        assert ctx.status is RunStatus.COMPLETE
        assert 0.0 <= ctx.accuracy <= 100.0
        assert set(ctx.predictions) == set(range(1, 101))
        assert set(ctx.predictions.values()) <= {"Reorder", "Healthy"}
