"""
Reorder Point — lead-time demand plus a proportional safety buffer.

Algorithm:
  Daily Demand       = Avg Weekly Sales / 7
  Lead-Time Demand   = Daily Demand × Lead Time (days)
  Safety Stock       = Lead-Time Demand × Safety Factor
  ROP                = ⌈Lead-Time Demand + Safety Stock⌉

A product needs a reorder when its on-hand inventory is at or below the ROP.
The safety factor defaults to Settings.safety_factor.
"""

import math
from dataclasses import dataclass

from core.config import get_settings

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class ReorderCalculation:
    """Intermediate quantities of a reorder-point calculation."""

    avg_weekly_sales: float
    lead_time_days: int
    daily_sales: float
    demand_during_lead: float
    safety_stock: float
    reorder_point: int


def calculate_reorder_point(
    avg_weekly_sales: float,
    lead_time_days: int,
    safety_factor: float | None = None,
) -> ReorderCalculation:
    """Compute the reorder point for one product."""
    if safety_factor is None:
        safety_factor = get_settings().safety_factor
    daily_sales = avg_weekly_sales / DAYS_PER_WEEK
    demand_during_lead = daily_sales * lead_time_days
    safety_stock = demand_during_lead * safety_factor
    return ReorderCalculation(
        avg_weekly_sales=avg_weekly_sales,
        lead_time_days=lead_time_days,
        daily_sales=daily_sales,
        demand_during_lead=demand_during_lead,
        safety_stock=safety_stock,
        reorder_point=math.ceil(demand_during_lead + safety_stock),
    )


def reorder_point(
    avg_weekly_sales: float,
    lead_time_days: int,
    safety_factor: float | None = None,
) -> int:
    """Shortcut returning only the ROP quantity."""
    return calculate_reorder_point(avg_weekly_sales, lead_time_days, safety_factor).reorder_point


def needs_reorder(inventory: int, rop: int) -> bool:
    """Stock at the ROP already counts as a reorder."""
    return inventory <= rop
