"""
Catalog records flowing through the reorder-signal pipeline.

ProductRecord is frozen: the ground-truth label is fixed at creation and is
what the classifier is trained and evaluated against.
"""

import uuid
from dataclasses import asdict, dataclass, field

import pandas as pd

REORDER = "Reorder"
HEALTHY = "Healthy"

BATCH_COLUMNS = ["id", "name", "inventory", "avg_sales", "lead_time", "ground_truth_reorder"]

# product id → "Reorder" | "Healthy"
PredictionResult = dict[int, str]


@dataclass(frozen=True)
class ProductRecord:
    id: int
    name: str
    inventory: int
    avg_sales: int
    lead_time: int
    ground_truth_reorder: bool


@dataclass(frozen=True)
class Batch:
    """One generated set of products, processed (and normalized) together."""

    records: tuple[ProductRecord, ...] = ()
    batch_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, index: int) -> ProductRecord:
        return self.records[index]

    @property
    def ids(self) -> list[int]:
        return [r.id for r in self.records]

    def to_frame(self) -> pd.DataFrame:
        if not self.records:
            return pd.DataFrame(columns=BATCH_COLUMNS)
        return pd.DataFrame([asdict(r) for r in self.records], columns=BATCH_COLUMNS)
