from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    total_products: int
    pending_orders: int
    low_stock_items: int
    total_revenue: float
    low_stock_threshold: int
