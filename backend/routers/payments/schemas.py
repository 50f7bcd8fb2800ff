from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from services.order_status import TransactionStatus


class ParseSmsRequest(BaseModel):
    sms_text: str = Field(min_length=1)


class ParseSmsResponse(BaseModel):
    amount: float
    phone: str


class ProcessSmsRequest(BaseModel):
    sms_text: Optional[str] = None
    amount: float = Field(gt=0)
    phone: str = Field(min_length=10, max_length=20)
    upi_id: Optional[str] = None
    transaction_id: Optional[str] = None


class ProcessSmsResponse(BaseModel):
    success: bool
    message: str
    order_id: Optional[int] = None
    transaction_id: int


class TransactionResponse(BaseModel):
    id: int
    amount: float
    sender_phone: str
    sms_phone: str
    upi_id: Optional[str] = None
    transaction_id: Optional[str] = None
    order_id: Optional[int] = None
    status: TransactionStatus
    note: Optional[str] = None
    date_received: datetime
    created_at: datetime

    class Config:
        from_attributes = True
