"""
Test Configuration — settings, seeded randomness, and hand-built batches.

Classifier stubs live in tests/stubs.py.
"""

import random

import pytest

from core.config import Settings
from inventory.reorder import reorder_point
from ml.records import Batch, ProductRecord


def make_record(record_id: int, inventory: int, avg_sales: int, lead_time: int) -> ProductRecord:
    rop = reorder_point(avg_sales, lead_time)
    return ProductRecord(
        id=record_id,
        name=f"Test Item {record_id}",
        inventory=inventory,
        avg_sales=avg_sales,
        lead_time=lead_time,
        ground_truth_reorder=inventory <= rop,
    )


def make_batch(rows: list[tuple[int, int, int]]) -> Batch:
    """rows: (inventory, avg_sales, lead_time) per product; ids are 1-based."""
    return Batch(records=tuple(make_record(i, *row) for i, row in enumerate(rows, start=1)))


@pytest.fixture
def settings():
    """Defaults with the simulated fetch delay switched off."""
    return Settings(fetch_delay_seconds=0.0, random_seed=None)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def three_item_batch():
    # ROPs: ceil(35/7*2*1.5)=15, ceil(14/7*7*1.5)=21, ceil(7/7*4*1.5)=6
    return make_batch([(10, 35, 2), (80, 14, 7), (6, 7, 4)])


@pytest.fixture
def batch_factory():
    return make_batch
