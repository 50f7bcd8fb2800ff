"""
Reconcile a payment notification against Pending orders.

The oldest Pending order with the same total and phone wins. Confirmation is
a conditional update, so when two notifications race for one order the
loser moves on to the next candidate or is filed as Unmatched.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from models import Transaction
from services.order_status import TransactionStatus
from services.sms_parser import format_amount
from store.base import Store

logger = logging.getLogger(__name__)

# Candidates tried before giving up on a notification that keeps losing races
MAX_MATCH_ATTEMPTS = 3


@dataclass
class PaymentNotification:
    amount: float
    phone: str
    sms_text: Optional[str] = None
    sender_id: Optional[str] = None
    upi_id: Optional[str] = None
    transaction_id: Optional[str] = None


@dataclass
class MatchResult:
    success: bool
    message: str
    transaction: Transaction
    order_id: Optional[int] = None


class PaymentMatcher:

    def __init__(self, store: Store):
        self.store = store

    async def _claim_order(self, amount: float, phone: str) -> Optional[int]:
        for _ in range(MAX_MATCH_ATTEMPTS):
            order = await self.store.find_pending_order_by_amount_phone(amount, phone)
            if order is None:
                return None
            if await self.store.confirm_pending_payment(order.id):
                return order.id
            logger.info(f"Order {order.id} was confirmed concurrently, trying next candidate")
        return None

    async def process(self, notification: PaymentNotification) -> MatchResult:
        amount, phone = notification.amount, notification.phone

        try:
            order_id = await self._claim_order(amount, phone)

            if order_id is not None:
                status = TransactionStatus.MATCHED
                message = f"Payment confirmed for Order #{order_id}"
            else:
                status = TransactionStatus.UNMATCHED
                message = f"No matching order found for Rs.{format_amount(amount)} from {phone}"

            transaction = await self.store.create_transaction({
                "amount": amount,
                "sender_phone": phone,
                "sms_phone": phone,
                "upi_id": notification.upi_id,
                "transaction_id": notification.transaction_id,
                "order_id": order_id,
                "status": status.value,
                "note": message,
            })

            if notification.sms_text:
                await self.store.create_raw_transaction({
                    "sms_text": notification.sms_text,
                    "sender_id": notification.sender_id or "",
                    "amount": amount,
                    "phone": phone,
                    "status": status.value,
                    "note": message,
                })

            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        if order_id is None:
            logger.warning(f"Unmatched payment of Rs.{format_amount(amount)} from {phone}")
        else:
            logger.info(f"Payment of Rs.{format_amount(amount)} from {phone} confirmed order {order_id}")
        return MatchResult(
            success=order_id is not None,
            message=message,
            transaction=transaction,
            order_id=order_id,
        )
