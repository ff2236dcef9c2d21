"""Decision mapping — classifier probabilities → Reorder / Healthy.

The threshold defaults to Settings.decision_threshold.
"""

from collections.abc import Iterable, Sequence

from core.config import get_settings
from ml.records import HEALTHY, REORDER, Batch, PredictionResult


def decide_one(probability: float, threshold: float | None = None) -> str:
    if threshold is None:
        threshold = get_settings().decision_threshold
    # Strictly greater: a coin-flip probability stays Healthy. NaN compares False.
    return REORDER if probability > threshold else HEALTHY


def decide(probabilities: Iterable[float], threshold: float | None = None) -> list[str]:
    if threshold is None:
        threshold = get_settings().decision_threshold
    return [decide_one(float(p), threshold) for p in probabilities]


def to_prediction_result(batch: Batch, decisions: Sequence[str]) -> PredictionResult:
    """Key decisions by product id, positionally."""
    if len(decisions) != len(batch):
        raise ValueError(f"Expected {len(batch)} decisions, got {len(decisions)}")
    return {record.id: decision for record, decision in zip(batch, decisions)}
