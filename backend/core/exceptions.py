"""
Error taxonomy for the reorder-signal pipeline.

Only PipelineBusyError ever propagates out of a pipeline call. Fatal
errors end the run as Failed with the message in RunContext.error;
non-fatal ones are appended to RunContext.warnings and the pipeline
carries on with its documented fallback.
"""


class ShelfSignalError(Exception):
    """Base for all pipeline errors."""


class InvalidBatchSize(ShelfSignalError):
    """Requested batch size is not a positive integer. Treated as an empty batch."""

    def __init__(self, count: object):
        self.count = count
        super().__init__(f"Batch size must be a positive integer, got {count!r}")


class DegenerateColumn(ShelfSignalError):
    """A feature column has zero range in the current batch. Mapped to 0.0."""

    def __init__(self, column: str, value: float):
        self.column = column
        self.value = value
        super().__init__(f"Feature column '{column}' is constant ({value}) across the batch")


class InvalidBatch(ShelfSignalError):
    """The batch frame failed schema validation. The run ends as Failed."""

    def __init__(self, n_failures: int):
        self.n_failures = n_failures
        super().__init__(f"Batch failed validation with {n_failures} schema failure(s)")


class EmptyBatchTraining(ShelfSignalError):
    """Training was requested on a batch with no records. The run is a no-op."""

    def __init__(self):
        super().__init__("Cannot train on an empty batch")


class ClassifierFailure(ShelfSignalError):
    """Any failure raised inside the classifier's train/evaluate/predict calls."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Classifier failed during {stage}: {cause}")


class PipelineBusyError(ShelfSignalError):
    """A run was started while another run on the same runner is still active."""

    def __init__(self):
        super().__init__("A pipeline run is already in progress")
