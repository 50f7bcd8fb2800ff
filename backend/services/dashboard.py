"""
Read-only summary counters for the dashboard
"""
from dataclasses import dataclass
from typing import Optional
import logging

from config import DEFAULT_LOW_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD_KEY
from store.base import Store

logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    total_products: int
    pending_orders: int
    low_stock_items: int
    total_revenue: float
    low_stock_threshold: int


def parse_threshold(value: Optional[str]) -> int:
    """Stored setting value, or the default when missing, non-numeric or negative"""
    if value is None:
        return DEFAULT_LOW_STOCK_THRESHOLD
    try:
        threshold = int(str(value).strip())
    except ValueError:
        logger.warning(f"Unparseable {LOW_STOCK_THRESHOLD_KEY} setting {value!r}, using {DEFAULT_LOW_STOCK_THRESHOLD}")
        return DEFAULT_LOW_STOCK_THRESHOLD
    if threshold < 0:
        return DEFAULT_LOW_STOCK_THRESHOLD
    return threshold


class DashboardAggregator:

    def __init__(self, store: Store):
        self.store = store

    async def low_stock_threshold(self) -> int:
        return parse_threshold(await self.store.get_setting(LOW_STOCK_THRESHOLD_KEY))

    async def stats(self) -> DashboardStats:
        threshold = await self.low_stock_threshold()
        counts = await self.store.summary_counts(threshold)
        return DashboardStats(
            total_products=counts.total_products,
            pending_orders=counts.pending_orders,
            low_stock_items=counts.low_stock_items,
            total_revenue=round(counts.total_revenue, 2),
            low_stock_threshold=threshold,
        )
