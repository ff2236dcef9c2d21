"""
Reorder Classifier — small feed-forward network over normalized features.

Architecture (Keras):
  Dense(16, relu) → Dense(8, relu) → Dense(1, sigmoid)
  Adam(lr=0.05), binary cross-entropy, 50 epochs, reshuffled every epoch.

Any object satisfying ReorderClassifier can replace the Keras model; the
pipeline only relies on train / evaluate / predict / close.

Usage:
    with classifier_session(KerasReorderClassifier) as clf:
        clf.train(X, y, observer=lambda epoch, loss: ...)
        accuracy = clf.evaluate(X, y)
        probabilities = clf.predict(X)
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

import numpy as np
import structlog

from core.config import Settings, get_settings

logger = structlog.get_logger()

# Called synchronously at every epoch end with (epoch, loss).
EpochObserver = Callable[[int, float], None]


@runtime_checkable
class ReorderClassifier(Protocol):
    """Binary classifier trainable on numeric feature vectors."""

    def train(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        observer: EpochObserver | None = None,
    ) -> None: ...

    def predict(self, features: np.ndarray) -> np.ndarray: ...

    def evaluate(self, features: np.ndarray, labels: np.ndarray) -> float: ...

    def close(self) -> None: ...


ClassifierFactory = Callable[[], ReorderClassifier]


def _epoch_callback(observer: EpochObserver | None, log_every: int) -> Any:
    from tensorflow import keras

    class _EpochEnd(keras.callbacks.Callback):
        def on_epoch_end(self, epoch, logs=None):
            loss = float((logs or {}).get("loss", float("nan")))
            if log_every and epoch % log_every == 0:
                logger.info("classifier.epoch", epoch=epoch, loss=round(loss, 4))
            if observer is not None:
                observer(epoch, loss)

    return _EpochEnd()


class KerasReorderClassifier:
    """TensorFlow/Keras implementation of ReorderClassifier."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.epochs = settings.epochs
        self.learning_rate = settings.learning_rate
        self.hidden_units = list(settings.hidden_units)
        self.log_every = settings.log_every_n_epochs
        self._model = None

    def _build(self, n_features: int):
        try:
            import tensorflow as tf
            from tensorflow.keras import layers, models
        except ImportError:
            raise ImportError("TensorFlow required for the reorder classifier. Install: pip install tensorflow")

        model = models.Sequential(
            [layers.Input(shape=(n_features,))]
            + [layers.Dense(units, activation="relu") for units in self.hidden_units]
            + [layers.Dense(1, activation="sigmoid")]
        )
        model.compile(
            optimizer=tf.keras.optimizers.Adam(learning_rate=self.learning_rate),
            loss="binary_crossentropy",
            metrics=["accuracy"],
        )
        return model

    def _require_model(self):
        if self._model is None:
            raise RuntimeError("Classifier has not been trained")
        return self._model

    def train(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        observer: EpochObserver | None = None,
    ) -> None:
        X = np.asarray(features, dtype=np.float32)
        y = np.asarray(labels, dtype=np.float32).reshape(-1, 1)
        if len(X) != len(y):
            raise ValueError(f"features/labels length mismatch: {len(X)} != {len(y)}")

        self._model = self._build(X.shape[1])
        logger.info(
            "classifier.train.start",
            rows=len(X),
            epochs=self.epochs,
            learning_rate=self.learning_rate,
            layers=[X.shape[1], *self.hidden_units, 1],
        )
        history = self._model.fit(
            X,
            y,
            epochs=self.epochs,
            shuffle=True,
            callbacks=[_epoch_callback(observer, self.log_every)],
            verbose=0,
        )
        losses = history.history.get("loss", [])
        logger.info("classifier.train.done", final_loss=round(float(losses[-1]), 4) if losses else None)

    def evaluate(self, features: np.ndarray, labels: np.ndarray) -> float:
        model = self._require_model()
        X = np.asarray(features, dtype=np.float32)
        y = np.asarray(labels, dtype=np.float32).reshape(-1, 1)
        result = model.evaluate(X, y, verbose=0, return_dict=True)
        return float(result["accuracy"])

    def predict(self, features: np.ndarray) -> np.ndarray:
        model = self._require_model()
        X = np.asarray(features, dtype=np.float32)
        probabilities = model.predict(X, verbose=0).reshape(-1)
        return np.clip(probabilities.astype(np.float64), 0.0, 1.0)

    def close(self) -> None:
        """Drop the model and free the Keras graph state it allocated."""
        if self._model is None:
            return
        self._model = None
        from tensorflow import keras

        keras.backend.clear_session()


@contextmanager
def classifier_session(factory: ClassifierFactory) -> Iterator[ReorderClassifier]:
    """Create a classifier and release it on exit, whether the run succeeded or not."""
    classifier = factory()
    try:
        yield classifier
    finally:
        classifier.close()
        logger.debug("classifier.released", classifier=type(classifier).__name__)
