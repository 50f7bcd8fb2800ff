"""
Order and payment status lifecycles.

    payment: Pending -> Confirmed | Failed
    order:   Processing -> Packed -> Delivered
             Processing | Packed -> Cancelled   (payment forced to Failed)

Delivered and Cancelled are terminal. Requesting the current value is a no-op.
"""
from enum import Enum
from typing import Optional, Tuple
import logging

from services.errors import InvalidStatusTransition, KaamDhenuError, NotFoundError

logger = logging.getLogger(__name__)

STATUS_FIELDS = ("payment_status", "order_status")
MAX_STATUS_ATTEMPTS = 3


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    FAILED = "Failed"


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    PACKED = "Packed"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class TransactionStatus(str, Enum):
    MATCHED = "Matched"
    UNMATCHED = "Unmatched"


PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.CONFIRMED, PaymentStatus.FAILED}),
    PaymentStatus.CONFIRMED: frozenset(),
    PaymentStatus.FAILED: frozenset(),
}

ORDER_TRANSITIONS = {
    OrderStatus.PROCESSING: frozenset({OrderStatus.PACKED, OrderStatus.CANCELLED}),
    OrderStatus.PACKED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition_payment(current: PaymentStatus, requested: PaymentStatus) -> bool:
    return current == requested or requested in PAYMENT_TRANSITIONS[current]


def can_transition_order(current: OrderStatus, requested: OrderStatus) -> bool:
    return current == requested or requested in ORDER_TRANSITIONS[current]


def plan_status_change(
    current_payment: str,
    current_order: str,
    payment_status: Optional[str] = None,
    order_status: Optional[str] = None
) -> Tuple[PaymentStatus, OrderStatus]:
    """
    Validate a requested status change and return the resulting pair.
    Raises InvalidStatusTransition for anything outside the lifecycle.
    """
    payment = PaymentStatus(current_payment)
    order = OrderStatus(current_order)

    new_order = OrderStatus(order_status) if order_status else order
    if not can_transition_order(order, new_order):
        raise InvalidStatusTransition("order_status", order.value, new_order.value)

    new_payment = PaymentStatus(payment_status) if payment_status else payment

    if new_order == OrderStatus.CANCELLED and order != OrderStatus.CANCELLED:
        if payment_status and new_payment != PaymentStatus.FAILED and new_payment != payment:
            raise InvalidStatusTransition("payment_status", payment.value, new_payment.value)
        return PaymentStatus.FAILED, new_order

    if not can_transition_payment(payment, new_payment):
        raise InvalidStatusTransition("payment_status", payment.value, new_payment.value)

    return new_payment, new_order


async def apply_order_update(store, order_id: int, changes: dict):
    """
    Apply a partial order update: contact fields as given, statuses only
    along the lifecycle. Commits on success.

    The status write is conditional on the statuses the change was planned
    from. If the row moved in between (a payment SMS confirming it, another
    staff edit), the change is re-planned against the stored row.
    """
    order = await store.get_order(order_id)
    if not order:
        raise NotFoundError("Order", order_id)

    requested_payment = changes.get("payment_status")
    requested_order = changes.get("order_status")
    contact = {key: value for key, value in changes.items() if key not in STATUS_FIELDS}

    try:
        if requested_payment or requested_order:
            for _ in range(MAX_STATUS_ATTEMPTS):
                payment, order_state = plan_status_change(
                    order.payment_status,
                    order.order_status,
                    requested_payment,
                    requested_order,
                )
                applied = await store.update_order_status(
                    order_id,
                    order.payment_status,
                    order.order_status,
                    payment.value,
                    order_state.value,
                )
                if applied:
                    break

                logger.info(f"Order {order_id} changed during status update, re-planning")
                order = await store.get_order(order_id)
                if not order:
                    raise NotFoundError("Order", order_id)
            else:
                raise KaamDhenuError(f"Order {order_id} is being updated concurrently, try again")

        if contact:
            await store.update_order(order_id, contact)
        await store.commit()
    except Exception:
        await store.rollback()
        raise

    updated = await store.get_order(order_id)
    logger.info(
        f"Order {order_id} updated: payment={updated.payment_status}, status={updated.order_status}"
    )
    return updated
