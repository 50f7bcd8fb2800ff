from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class StockAction(str, Enum):
    ADD = "ADD"
    UPDATE = "UPDATE"
    DEDUCT = "DEDUCT"
    DELETE = "DELETE"


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100, pattern=r"^\S+$")
    quantity: int = Field(ge=0)
    district: str = Field(min_length=1, max_length=100, pattern=r"^\S+$")
    price: float = Field(ge=0)
    category: str = Field(min_length=1, max_length=50)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100, pattern=r"^\S+$")
    quantity: Optional[int] = Field(default=None, ge=0)
    district: Optional[str] = Field(default=None, min_length=1, max_length=100, pattern=r"^\S+$")
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)


class ProductResponse(BaseModel):
    id: int
    name: str
    quantity: int
    district: str
    added_by: str
    price: float
    unique_number: int
    category: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StockHistoryResponse(BaseModel):
    id: int
    product_id: int
    action: StockAction
    quantity: int
    timestamp: datetime

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
