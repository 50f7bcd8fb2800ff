"""
Order intake: resolve every item line, check stock, then deduct and persist
the order as one unit of work. Any failure rolls the whole order back.
"""
from dataclasses import dataclass
from typing import Dict, List
import logging

from models import Order, Product
from services.errors import EmptyOrder, InsufficientStock, KaamDhenuError, OrderItemNotFound
from services.order_parser import OrderItemLine, extract_item_lines
from services.order_status import OrderStatus, PaymentStatus
from store.base import Store

logger = logging.getLogger(__name__)


@dataclass
class OrderSubmission:
    telegram_id: str
    name: str
    address: str
    phone: str
    district: str
    order_details: str


@dataclass
class ResolvedLine:
    line: OrderItemLine
    product: Product


class OrderIntake:

    def __init__(self, store: Store):
        self.store = store

    async def _resolve_lines(self, lines: List[OrderItemLine]) -> List[ResolvedLine]:
        """Look up each line and check it against stock still unclaimed by earlier lines"""
        resolved: List[ResolvedLine] = []
        claimed: Dict[int, int] = {}

        for line in lines:
            product = await self.store.find_product(line.product, line.district, line.unique_number)
            if not product:
                raise OrderItemNotFound(line.product, line.district, line.unique_number)

            available = product.quantity - claimed.get(product.id, 0)
            if line.quantity > available:
                raise InsufficientStock(line.product, line.district, line.quantity, available)

            claimed[product.id] = claimed.get(product.id, 0) + line.quantity
            resolved.append(ResolvedLine(line=line, product=product))

        return resolved

    async def place_order(self, submission: OrderSubmission) -> Order:
        extracted = extract_item_lines(submission.order_details)
        if extracted.malformed_lines:
            raise KaamDhenuError(f"Malformed item line: {extracted.malformed_lines[0]}")
        if not extracted.items:
            raise EmptyOrder()

        try:
            resolved = await self._resolve_lines(extracted.items)

            product_ids: List[int] = []
            items = []
            total_amount = 0.0
            for entry in resolved:
                product, line = entry.product, entry.line
                # Conditional decrement; loses cleanly to a concurrent order
                await self.store.deduct_stock(product.id, line.quantity)

                line_total = product.price * line.quantity
                total_amount += line_total
                product_ids.append(product.id)
                items.append({
                    "product_id": product.id,
                    "product": product.name,
                    "district": product.district,
                    "added_by": line.added_by,
                    "unique_number": product.unique_number,
                    "quantity": line.quantity,
                    "unit_price": product.price,
                    "line_total": round(line_total, 2),
                })

            order = await self.store.create_order({
                "telegram_id": submission.telegram_id,
                "name": submission.name,
                "address": submission.address,
                "phone": submission.phone,
                "district": submission.district,
                "order_details": submission.order_details,
                "product_ids": product_ids,
                "items": items,
                "total_amount": round(total_amount, 2),
                "payment_status": PaymentStatus.PENDING.value,
                "order_status": OrderStatus.PROCESSING.value,
            })
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        logger.info(
            f"Order {order.id} placed by {submission.telegram_id}: "
            f"{len(items)} line(s), total {order.total_amount}"
        )
        return order
