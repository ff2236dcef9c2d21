"""
Feature Framing — products → numeric matrix + reorder labels.

Feature Columns (3):
  inventory   — units on hand
  avg_sales   — units sold per week
  lead_time   — supplier lead time in days

Normalization is per batch: min/max are fitted on the rows being trained
on and are never persisted. A column with zero range (e.g. every product
sharing the same lead time) has no information and maps to 0.0.
"""

from dataclasses import dataclass, field

import numpy as np
import structlog

from core.exceptions import DegenerateColumn
from ml.records import Batch

logger = structlog.get_logger()

FEATURE_COLS = ["inventory", "avg_sales", "lead_time"]
LABEL_COL = "ground_truth_reorder"
N_FEATURES = len(FEATURE_COLS)

DEGENERATE_FILL = 0.0


def get_feature_cols() -> list[str]:
    """Return the feature column list (a copy)."""
    return FEATURE_COLS.copy()


def frame(batch: Batch) -> tuple[np.ndarray, np.ndarray]:
    """
    Convert a batch into (features, labels).

    features: float64 array of shape (n, 3) in FEATURE_COLS order.
    labels:   int64 array of shape (n,), 1 = needs reorder.
    """
    if len(batch) == 0:
        return np.empty((0, N_FEATURES), dtype=np.float64), np.empty((0,), dtype=np.int64)

    features = np.array(
        [[r.inventory, r.avg_sales, r.lead_time] for r in batch],
        dtype=np.float64,
    )
    labels = np.array([1 if r.ground_truth_reorder else 0 for r in batch], dtype=np.int64)
    return features, labels


@dataclass
class NormalizedFeatures:
    """Min/max-scaled features plus the statistics they were scaled with."""

    values: np.ndarray
    col_min: np.ndarray
    col_max: np.ndarray
    degenerate: list[DegenerateColumn] = field(default_factory=list)

    @property
    def degenerate_columns(self) -> list[str]:
        return [d.column for d in self.degenerate]


def fit_transform(features: np.ndarray) -> NormalizedFeatures:
    """Scale each column to [0, 1] using this batch's min and max."""
    features = np.asarray(features, dtype=np.float64)
    if features.ndim != 2:
        raise ValueError(f"Expected a 2-D feature matrix, got shape {features.shape}")

    if features.shape[0] == 0:
        empty = np.full(features.shape[1], np.nan)
        return NormalizedFeatures(values=features.copy(), col_min=empty, col_max=empty.copy())

    col_min = features.min(axis=0)
    col_max = features.max(axis=0)
    span = col_max - col_min

    degenerate_mask = span == 0
    safe_span = np.where(degenerate_mask, 1.0, span)
    values = (features - col_min) / safe_span
    values[:, degenerate_mask] = DEGENERATE_FILL

    cols = FEATURE_COLS if features.shape[1] == N_FEATURES else [f"col_{j}" for j in range(features.shape[1])]
    degenerate = [DegenerateColumn(cols[j], float(col_min[j])) for j in np.flatnonzero(degenerate_mask)]
    for d in degenerate:
        logger.warning("features.degenerate_column", column=d.column, value=d.value, fill=DEGENERATE_FILL)

    return NormalizedFeatures(values=values, col_min=col_min, col_max=col_max, degenerate=degenerate)
