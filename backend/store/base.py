"""
Persistence interface consumed by the order/payment pipeline and the routers.

Implementations own identity assignment and must make deduct_stock and
confirm_pending_payment atomic with respect to concurrent callers.
Nothing is durable until commit(); rollback() discards every pending change
made through the same store instance.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from models import Order, Product, RawTransaction, Role, Setting, StockHistory, Transaction, User, UserInfo


@dataclass(frozen=True)
class SummaryCounts:
    total_products: int
    pending_orders: int
    low_stock_items: int
    total_revenue: float


class Store(ABC):

    # Unit of work

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    # Products

    @abstractmethod
    async def list_products(self, district: Optional[str] = None) -> List[Product]: ...

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[Product]: ...

    @abstractmethod
    async def create_product(self, data: Dict[str, Any]) -> Product:
        """Insert a product, assigning the next unique_number for its name + district"""

    @abstractmethod
    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Product]: ...

    @abstractmethod
    async def delete_product(self, product_id: int) -> bool: ...

    @abstractmethod
    async def find_product(self, name: str, district: str, unique_number: int) -> Optional[Product]:
        """Case-insensitive name, exact district and unique number"""

    @abstractmethod
    async def next_unique_number(self, name: str, district: str) -> int: ...

    @abstractmethod
    async def deduct_stock(self, product_id: int, amount: int) -> Product:
        """
        Atomically decrement stock if at least `amount` is available.
        Raises NotFoundError or InsufficientStock; never leaves quantity < 0.
        """

    @abstractmethod
    async def list_stock_history(self, product_id: int) -> List[StockHistory]: ...

    # Orders

    @abstractmethod
    async def list_orders(self, district: Optional[str] = None, payment_status: Optional[str] = None) -> List[Order]: ...

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Order]: ...

    @abstractmethod
    async def create_order(self, data: Dict[str, Any]) -> Order: ...

    @abstractmethod
    async def update_order(self, order_id: int, data: Dict[str, Any]) -> Optional[Order]: ...

    @abstractmethod
    async def update_order_status(
        self,
        order_id: int,
        expected_payment: str,
        expected_order: str,
        payment_status: str,
        order_status: str
    ) -> bool:
        """Set both statuses only if the row still holds the expected pair"""

    @abstractmethod
    async def find_pending_order_by_amount_phone(self, amount: float, phone: str) -> Optional[Order]:
        """Oldest Pending order with this total whose phone matches after +91 normalization"""

    @abstractmethod
    async def confirm_pending_payment(self, order_id: int) -> bool:
        """Flip payment_status Pending -> Confirmed; False if it was no longer Pending"""

    # Payments

    @abstractmethod
    async def create_transaction(self, data: Dict[str, Any]) -> Transaction: ...

    @abstractmethod
    async def list_transactions(self, status: Optional[str] = None) -> List[Transaction]: ...

    @abstractmethod
    async def create_raw_transaction(self, data: Dict[str, Any]) -> RawTransaction: ...

    # Users and roles

    @abstractmethod
    async def list_users(self) -> List[User]: ...

    @abstractmethod
    async def get_user(self, telegram_id: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> User: ...

    @abstractmethod
    async def update_user(self, telegram_id: str, data: Dict[str, Any]) -> Optional[User]: ...

    @abstractmethod
    async def list_roles(self, telegram_id: Optional[str] = None) -> List[Role]: ...

    @abstractmethod
    async def assign_role(self, telegram_id: str, role: str, district: Optional[str] = None) -> Role:
        """Replace any existing (telegram_id, role) entry"""

    @abstractmethod
    async def delete_role(self, telegram_id: str, role: str) -> bool: ...

    @abstractmethod
    async def get_user_info(self, telegram_id: str) -> Optional[UserInfo]: ...

    @abstractmethod
    async def upsert_user_info(self, data: Dict[str, Any]) -> UserInfo: ...

    # Settings

    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set_setting(self, key: str, value: str) -> Setting: ...

    @abstractmethod
    async def list_settings(self) -> List[Setting]: ...

    # Dashboard

    @abstractmethod
    async def summary_counts(self, low_stock_threshold: int) -> SummaryCounts:
        """All four counters read as one snapshot"""
