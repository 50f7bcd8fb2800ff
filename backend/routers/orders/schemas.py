from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from services.order_status import OrderStatus, PaymentStatus


class OrderCreate(BaseModel):
    """Totals, product ids and statuses are computed server-side; any sent are ignored"""
    telegram_id: Optional[str] = None
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1)
    phone: str = Field(min_length=10, max_length=20)
    district: str = Field(min_length=1, max_length=100)
    order_details: str = Field(min_length=1)


class OrderUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=10, max_length=20)
    payment_status: Optional[PaymentStatus] = None
    order_status: Optional[OrderStatus] = None


class OrderItemResponse(BaseModel):
    product_id: int
    product: str
    district: str
    added_by: str
    unique_number: int
    quantity: int
    unit_price: float
    line_total: float


class OrderResponse(BaseModel):
    id: int
    telegram_id: str
    name: str
    address: str
    phone: str
    district: str
    order_details: str
    product_ids: List[int]
    items: Optional[List[OrderItemResponse]] = None
    total_amount: float
    payment_status: PaymentStatus
    order_status: OrderStatus
    date_ordered: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    total: int


class ParseOrderTextRequest(BaseModel):
    order_text: str


class ParsedOrderItem(BaseModel):
    product: str
    quantity: int
    district: str
    added_by: str
    unique_number: int


class ParsedOrderResponse(BaseModel):
    name: str
    address: str
    items: List[ParsedOrderItem]
