"""
Data Validation — Pandera schema for generated batches.

Gate run before framing, so a malformed batch never reaches the classifier.

Usage:
    from ml.validate import validate_batch
    validated_df = validate_batch(batch.to_frame())
"""

import pandas as pd
import pandera as pa
import structlog
from pandera import Check, Column, DataFrameSchema

logger = structlog.get_logger()


BatchSchema = DataFrameSchema(
    columns={
        "id": Column(
            int,
            checks=[Check.gt(0, error="id must be positive")],
            unique=True,
            nullable=False,
            coerce=True,
        ),
        "name": Column(str, nullable=False, coerce=True),
        "inventory": Column(
            int,
            checks=[Check.ge(0, error="inventory must be non-negative")],
            nullable=False,
            coerce=True,
        ),
        "avg_sales": Column(
            float,
            checks=[Check.gt(0, error="avg_sales must be positive")],
            nullable=False,
            coerce=True,
        ),
        "lead_time": Column(
            int,
            checks=[Check.gt(0, error="lead_time must be positive")],
            nullable=False,
            coerce=True,
        ),
        "ground_truth_reorder": Column(bool, nullable=False, coerce=True),
    },
    strict=False,
    coerce=True,
    name="Batch",
)


def validate_batch(
    df: pd.DataFrame,
    raise_on_error: bool = True,
) -> pd.DataFrame:
    """
    Validate a batch frame (see ``Batch.to_frame``).

    Raises SchemaErrors if validation fails and raise_on_error=True.
    """
    try:
        validated = BatchSchema.validate(df, lazy=True)
        logger.info("validation.batch.passed", rows=len(validated))
        return validated
    except pa.errors.SchemaErrors as e:
        logger.error(
            "validation.batch.failed",
            n_errors=len(e.failure_cases),
            errors=e.failure_cases.to_dict("records")[:5],  # Log first 5
        )
        if raise_on_error:
            raise
        return df
