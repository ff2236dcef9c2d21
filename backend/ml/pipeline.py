"""
Reorder-Signal Pipeline — generate → frame → normalize → classify → decide.

Every stage takes a RunContext and returns a new one; nothing is kept in
module state, so two runs can never see each other's predictions.

Status flow:
  Idle → Fetching Data → Data Loaded
       → Preparing Tensors → Training Model → Running Predictions → Complete
                                           ↘ Failed (invalid batch or classifier error)

Error policies:
  - invalid batch size    → empty batch, note added to warnings
  - degenerate column     → normalized to 0.0, note added to warnings
  - empty batch training  → no-op, context returned unchanged
  - invalid batch frame   → status Failed, error recorded, classifier never built
  - classifier failure    → status Failed, error recorded, resources released

Usage:
    ctx = load_data(100)
    ctx = train_and_predict(ctx)
    print(ctx.status.label(), ctx.accuracy, ctx.predictions)
"""

import enum
import random
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from functools import partial

import numpy as np
import pandera as pa
import structlog

from core.config import Settings, get_settings
from core.exceptions import (
    ClassifierFailure,
    EmptyBatchTraining,
    InvalidBatch,
    InvalidBatchSize,
    PipelineBusyError,
)
from ml.classifier import ClassifierFactory, EpochObserver, KerasReorderClassifier, classifier_session
from ml.decide import decide, to_prediction_result
from ml.features import fit_transform, frame
from ml.records import REORDER, Batch, PredictionResult
from ml.synthesize import fetch_batch, generate, validate_count
from ml.validate import validate_batch

logger = structlog.get_logger()


class RunStatus(str, enum.Enum):
    IDLE = "Idle"
    FETCHING_DATA = "Fetching Data"
    DATA_LOADED = "Data Loaded"
    PREPARING_TENSORS = "Preparing Tensors"
    TRAINING_MODEL = "Training Model"
    RUNNING_PREDICTIONS = "Running Predictions"
    COMPLETE = "Complete"
    FAILED = "Failed"

    def label(self, epochs: int | None = None) -> str:
        """Human-facing status line."""
        if self is RunStatus.FETCHING_DATA:
            return "Fetching Data..."
        if self is RunStatus.DATA_LOADED:
            return "Data Loaded. Ready to Train."
        if self is RunStatus.PREPARING_TENSORS:
            return "Preparing Tensors..."
        if self is RunStatus.TRAINING_MODEL:
            return f"Training Model ({epochs} Epochs)..." if epochs else "Training Model..."
        if self is RunStatus.RUNNING_PREDICTIONS:
            return "Running Predictions..."
        return self.value


@dataclass(frozen=True)
class RunContext:
    """Everything one pipeline run knows, passed explicitly between stages."""

    batch: Batch = field(default_factory=Batch)
    status: RunStatus = RunStatus.IDLE
    predictions: PredictionResult = field(default_factory=dict)
    accuracy: float | None = None  # percent, one decimal
    error: str | None = None
    warnings: tuple[str, ...] = ()  # non-fatal notes: invalid size, degenerate columns
    status_history: tuple[RunStatus, ...] = (RunStatus.IDLE,)

    def advance(self, status: RunStatus, **changes) -> "RunContext":
        logger.info("pipeline.status", batch_id=self.batch.batch_id, status=status.value)
        return replace(self, status=status, status_history=self.status_history + (status,), **changes)

    def fail(self, error: BaseException) -> "RunContext":
        return self.advance(RunStatus.FAILED, predictions={}, accuracy=None, error=str(error))

    @property
    def reorder_count(self) -> int:
        return sum(1 for decision in self.predictions.values() if decision == REORDER)


# ──────────────────────────────────────────────────────────────────────────
# Stages
# ──────────────────────────────────────────────────────────────────────────


def _size_warnings(count: object) -> tuple[str, ...]:
    try:
        validate_count(count)
    except InvalidBatchSize as e:
        return (str(e),)
    return ()


def load_data(
    count: object = None,
    *,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> RunContext:
    """Generate a fresh batch; any earlier predictions are discarded."""
    settings = settings or get_settings()
    count = settings.batch_size if count is None else count
    ctx = RunContext().advance(RunStatus.FETCHING_DATA)
    batch = generate(count, rng=rng, settings=settings)
    return ctx.advance(RunStatus.DATA_LOADED, batch=batch, warnings=_size_warnings(count))


async def load_data_async(
    count: object = None,
    *,
    delay_seconds: float | None = None,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> RunContext:
    """Like load_data, but through the simulated (delayed) fetch."""
    settings = settings or get_settings()
    count = settings.batch_size if count is None else count
    ctx = RunContext().advance(RunStatus.FETCHING_DATA)
    batch = await fetch_batch(count, delay_seconds=delay_seconds, rng=rng, settings=settings)
    return ctx.advance(RunStatus.DATA_LOADED, batch=batch, warnings=_size_warnings(count))


def train_and_predict(
    context: RunContext,
    *,
    classifier_factory: ClassifierFactory | None = None,
    observer: EpochObserver | None = None,
    settings: Settings | None = None,
) -> RunContext:
    """
    Train on the context's batch, evaluate, and predict every product.

    Returns a new context; the input context is never modified.
    """
    settings = settings or get_settings()
    if len(context.batch) == 0:
        logger.warning("pipeline.train_skipped", reason=str(EmptyBatchTraining()), status=context.status.value)
        return context

    factory = classifier_factory or partial(KerasReorderClassifier, settings)

    ctx = context.advance(RunStatus.PREPARING_TENSORS, predictions={}, accuracy=None, error=None)
    try:
        validate_batch(ctx.batch.to_frame())
    except pa.errors.SchemaErrors as exc:
        failure = InvalidBatch(len(exc.failure_cases))
        logger.error("pipeline.invalid_batch", batch_id=ctx.batch.batch_id, error=str(failure))
        return ctx.fail(failure)

    features, labels = frame(ctx.batch)
    normalized = fit_transform(features)
    if normalized.degenerate:
        notes = ctx.warnings + tuple(str(d) for d in normalized.degenerate)
        ctx = replace(ctx, warnings=tuple(dict.fromkeys(notes)))

    stage = "setup"
    try:
        with classifier_session(factory) as clf:
            ctx = ctx.advance(RunStatus.TRAINING_MODEL)
            stage = "train"
            clf.train(normalized.values, labels, observer=observer)

            stage = "evaluate"
            accuracy = round(float(clf.evaluate(normalized.values, labels)) * 100, 1)

            ctx = ctx.advance(RunStatus.RUNNING_PREDICTIONS, accuracy=accuracy)
            stage = "predict"
            probabilities = np.asarray(clf.predict(normalized.values), dtype=np.float64).reshape(-1)
            decisions = decide(probabilities, threshold=settings.decision_threshold)
            predictions = to_prediction_result(ctx.batch, decisions)
    except Exception as exc:  # noqa: BLE001 - any classifier error ends the run as Failed
        failure = ClassifierFailure(stage, exc)
        logger.exception("pipeline.classifier_failed", batch_id=ctx.batch.batch_id, stage=stage)
        return ctx.fail(failure)

    done = ctx.advance(RunStatus.COMPLETE, predictions=predictions)
    logger.info(
        "pipeline.complete",
        batch_id=done.batch.batch_id,
        rows=len(done.batch),
        accuracy_pct=done.accuracy,
        predicted_reorders=done.reorder_count,
    )
    return done


def run_pipeline(
    count: object = None,
    *,
    classifier_factory: ClassifierFactory | None = None,
    observer: EpochObserver | None = None,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> RunContext:
    """Generate a batch and run it through training and prediction."""
    settings = settings or get_settings()
    ctx = load_data(count, rng=rng, settings=settings)
    return train_and_predict(ctx, classifier_factory=classifier_factory, observer=observer, settings=settings)


# ──────────────────────────────────────────────────────────────────────────
# Runner (one active action at a time)
# ──────────────────────────────────────────────────────────────────────────


class PipelineRunner:
    """
    Holds the latest RunContext between the "generate" and "train" actions.

    Starting an action while another is in flight raises PipelineBusyError.
    """

    def __init__(
        self,
        *,
        classifier_factory: ClassifierFactory | None = None,
        observer: EpochObserver | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.classifier_factory = classifier_factory
        self.observer = observer
        self.context = RunContext()
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._busy:
            raise PipelineBusyError()
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def generate(self, count: object = None, rng: random.Random | None = None) -> RunContext:
        with self._exclusive():
            self.context = load_data(count, rng=rng, settings=self.settings)
        return self.context

    async def generate_async(self, count: object = None, rng: random.Random | None = None) -> RunContext:
        with self._exclusive():
            self.context = await load_data_async(count, rng=rng, settings=self.settings)
        return self.context

    def train(self) -> RunContext:
        with self._exclusive():
            self.context = train_and_predict(
                self.context,
                classifier_factory=self.classifier_factory,
                observer=self.observer,
                settings=self.settings,
            )
        return self.context
