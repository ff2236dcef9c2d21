"""
Synthetic Catalog — mock inventory data standing in for a product API.

Each product gets a weekly sales rate and a supplier lead time; its
on-hand inventory is then drawn relative to the reorder point:

  - low-stock branch (p = low_stock_probability):
        inventory = ⌊U[0,1) × ROP⌋
  - well-stocked branch:
        inventory = ⌊ROP + U[0,1) × 100⌋

The low-stock draw is uniform over [0, ROP), so it always lands at or
below the ROP and every low-stock product is labelled Reorder. Only the
well-stocked branch at its floor (inventory == ROP) produces a Reorder
label outside the low-stock branch.

Usage:
    from ml.synthesize import generate
    batch = generate(100)
"""

import asyncio
import math
import random
from numbers import Integral

import structlog

from core.config import Settings, get_settings
from core.exceptions import InvalidBatchSize
from inventory.reorder import calculate_reorder_point, needs_reorder
from ml.records import Batch, ProductRecord

logger = structlog.get_logger()

CATEGORIES = ("Electronics", "Home", "Automotive", "Fashion", "Office")

AVG_SALES_RANGE = (5, 54)  # units / week, inclusive
LEAD_TIME_RANGE = (1, 14)  # days, inclusive
OVERSTOCK_SPREAD = 100  # max units above ROP for well-stocked items


def product_name(index: int) -> str:
    return f"{CATEGORIES[index % len(CATEGORIES)]} Item {index}"


def validate_count(count: object) -> int:
    # bool is an Integral subclass but never a meaningful size
    if isinstance(count, bool) or not isinstance(count, Integral) or count <= 0:
        raise InvalidBatchSize(count)
    return int(count)


def synthesize_product(
    index: int,
    rng: random.Random,
    low_stock_probability: float,
    safety_factor: float,
) -> ProductRecord:
    """Draw one product and fix its ground-truth reorder label."""
    avg_sales = rng.randint(*AVG_SALES_RANGE)
    lead_time = rng.randint(*LEAD_TIME_RANGE)
    rop = calculate_reorder_point(avg_sales, lead_time, safety_factor).reorder_point

    if rng.random() < low_stock_probability:
        inventory = math.floor(rng.random() * rop)
    else:
        inventory = math.floor(rop + rng.random() * OVERSTOCK_SPREAD)

    return ProductRecord(
        id=index,
        name=product_name(index),
        inventory=inventory,
        avg_sales=avg_sales,
        lead_time=lead_time,
        ground_truth_reorder=needs_reorder(inventory, rop),
    )


def generate(
    count: object,
    *,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> Batch:
    """
    Generate a batch of ``count`` products with ids 1..count.

    A non-positive or non-integer count yields an empty batch.
    """
    settings = settings or get_settings()
    try:
        n = validate_count(count)
    except InvalidBatchSize as e:
        logger.warning("synthesize.invalid_batch_size", count=repr(count), error=str(e))
        return Batch()

    if rng is None:
        rng = random.Random(settings.random_seed)

    records = tuple(
        synthesize_product(
            i,
            rng,
            low_stock_probability=settings.low_stock_probability,
            safety_factor=settings.safety_factor,
        )
        for i in range(1, n + 1)
    )
    batch = Batch(records=records)
    logger.info(
        "synthesize.generated",
        batch_id=batch.batch_id,
        rows=len(batch),
        reorder_labels=sum(r.ground_truth_reorder for r in records),
    )
    return batch


async def fetch_batch(
    count: object,
    *,
    delay_seconds: float | None = None,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> Batch:
    """Simulated API fetch: wait ``delay_seconds`` and then generate."""
    settings = settings or get_settings()
    delay = settings.fetch_delay_seconds if delay_seconds is None else delay_seconds
    logger.info("synthesize.fetching", count=repr(count), delay_seconds=delay)
    await asyncio.sleep(delay)
    return generate(count, rng=rng, settings=settings)
