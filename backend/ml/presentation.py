"""
Inventory table view — joins a run's decisions back onto its products.

Read-only: builds display rows and summary cards from a RunContext-like
input and renders them as plain text for the CLI.
"""

from dataclasses import dataclass

import pandas as pd

from ml.pipeline import RunContext, RunStatus
from ml.records import REORDER, Batch, PredictionResult

LOW_STOCK_UNITS = 20
PENDING = "Pending..."
EMPTY_MESSAGE = 'No data loaded. Run "generate" to begin.'

VIEW_COLUMNS = ["Product Name", "Current Stock", "Stock Tag", "Avg. Sales/Week", "Lead Time (Days)", "AI Prediction"]


@dataclass(frozen=True)
class ViewRow:
    name: str
    inventory: int
    stock_tag: str
    avg_sales: int
    lead_time: int
    prediction: str


@dataclass(frozen=True)
class SummaryCards:
    total_products: int
    model_status: str
    predicted_reorders: str
    model_accuracy: str


@dataclass(frozen=True)
class InventoryView:
    rows: tuple[ViewRow, ...]
    summary: SummaryCards

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                [r.name, f"{r.inventory} units", r.stock_tag, r.avg_sales, f"{r.lead_time} days", r.prediction]
                for r in self.rows
            ],
            columns=VIEW_COLUMNS,
        )


def stock_tag(inventory: int) -> str:
    return "low" if inventory < LOW_STOCK_UNITS else "ok"


def format_accuracy(accuracy: float | None) -> str:
    return "-" if accuracy is None else f"{accuracy:.1f}%"


def build_view(
    batch: Batch,
    predictions: PredictionResult,
    status: RunStatus | str,
    accuracy: float | None = None,
    epochs: int | None = None,
) -> InventoryView:
    rows = tuple(
        ViewRow(
            name=r.name,
            inventory=r.inventory,
            stock_tag=stock_tag(r.inventory),
            avg_sales=r.avg_sales,
            lead_time=r.lead_time,
            prediction=predictions.get(r.id, PENDING),
        )
        for r in batch
    )
    reorders = sum(1 for decision in predictions.values() if decision == REORDER)
    status_label = status.label(epochs) if isinstance(status, RunStatus) else str(status)
    summary = SummaryCards(
        total_products=len(batch),
        model_status=status_label,
        predicted_reorders=str(reorders) if predictions else "-",
        model_accuracy=format_accuracy(accuracy),
    )
    return InventoryView(rows=rows, summary=summary)


def view_from_context(context: RunContext, epochs: int | None = None) -> InventoryView:
    return build_view(context.batch, context.predictions, context.status, context.accuracy, epochs=epochs)


def render_table(view: InventoryView) -> str:
    s = view.summary
    header = (
        f"Total Products: {s.total_products} | Model Status: {s.model_status} | "
        f"Predicted Reorders: {s.predicted_reorders} | Model Accuracy: {s.model_accuracy}"
    )
    if not view.rows:
        return f"{header}\n\n{EMPTY_MESSAGE}"
    table = view.to_frame().to_string(index=False)
    return f"{header}\n\nInventory Analysis (showing {len(view.rows)} items)\n{table}"
