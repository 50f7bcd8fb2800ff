"""
SQLAlchemy implementation of the Store interface.

Works on the request's AsyncSession; nothing here commits on its own.
Stock deduction and payment confirmation are single conditional UPDATEs so
the database serializes competing writers.
"""
from sqlalchemy import select, update, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional
import logging

from models import Order, Product, RawTransaction, Role, Setting, StockHistory, Transaction, User, UserInfo
from services.errors import InsufficientStock, NotFoundError
from services.sms_parser import phone_variants
from store.base import Store, SummaryCounts

logger = logging.getLogger(__name__)

# Totals are stored as floats; anything closer than half a paisa is the same amount
AMOUNT_TOLERANCE = 0.005

PRODUCT_FIELDS = ("name", "quantity", "district", "added_by", "price", "category")
# Statuses only move through update_order_status
ORDER_FIELDS = ("telegram_id", "name", "address", "phone", "district")
USER_FIELDS = ("name", "primary_phone", "secondary_phone", "district", "language")
USER_INFO_FIELDS = (
    "name", "house_name", "landmark", "ward_no", "panchayat", "block",
    "sub_district", "district", "state", "primary_phone", "secondary_phone",
)


class SqlAlchemyStore(Store):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # =================
    # PRODUCTS
    # =================

    async def list_products(self, district: Optional[str] = None) -> List[Product]:
        query = select(Product)
        if district:
            query = query.where(Product.district == district)
        result = await self.db.execute(query.order_by(Product.id))
        return list(result.scalars().all())

    async def get_product(self, product_id: int) -> Optional[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _record_stock(self, product_id: int, action: str, quantity: int):
        self.db.add(StockHistory(product_id=product_id, action=action, quantity=quantity))

    async def next_unique_number(self, name: str, district: str) -> int:
        result = await self.db.execute(
            select(func.max(Product.unique_number)).where(
                and_(
                    func.lower(Product.name) == name.lower(),
                    Product.district == district
                )
            )
        )
        current = result.scalar()
        return (current or 0) + 1

    async def create_product(self, data: Dict[str, Any]) -> Product:
        values = {key: data[key] for key in PRODUCT_FIELDS if key in data}
        values["unique_number"] = await self.next_unique_number(values["name"], values["district"])

        product = Product(**values)
        self.db.add(product)
        await self.db.flush()

        await self._record_stock(product.id, "ADD", product.quantity)
        logger.info(f"Product {product.id} created: {product.name} #{product.unique_number} in {product.district}")
        return product

    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Product]:
        product = await self.get_product(product_id)
        if not product:
            return None

        old_quantity = product.quantity
        new_name = data.get("name") or product.name
        new_district = data.get("district") or product.district

        # Moving to another name/district takes the next free number there;
        # computed before assigning so autoflush never writes a colliding identity
        new_unique_number = product.unique_number
        if new_name.lower() != product.name.lower() or new_district != product.district:
            new_unique_number = await self.next_unique_number(new_name, new_district)

        for key in PRODUCT_FIELDS:
            if key in data and data[key] is not None:
                setattr(product, key, data[key])
        product.unique_number = new_unique_number

        if product.quantity != old_quantity:
            await self._record_stock(product.id, "UPDATE", product.quantity)

        await self.db.flush()
        return product

    async def delete_product(self, product_id: int) -> bool:
        product = await self.get_product(product_id)
        if not product:
            return False

        await self._record_stock(product.id, "DELETE", product.quantity)
        await self.db.delete(product)
        await self.db.flush()
        return True

    async def find_product(self, name: str, district: str, unique_number: int) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(
                and_(
                    func.lower(Product.name) == name.lower(),
                    Product.district == district,
                    Product.unique_number == unique_number
                )
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def deduct_stock(self, product_id: int, amount: int) -> Product:
        if amount <= 0:
            raise ValueError("Deducted amount must be positive")

        result = await self.db.execute(
            update(Product)
            .where(and_(Product.id == product_id, Product.quantity >= amount))
            .values(quantity=Product.quantity - amount)
            .execution_options(synchronize_session=False)
        )

        product = await self.get_product(product_id)
        if result.rowcount == 0:
            if not product:
                raise NotFoundError("Product", product_id)
            raise InsufficientStock(product.name, product.district, amount, product.quantity)

        await self._record_stock(product_id, "DEDUCT", amount)
        logger.info(f"Deducted {amount} from product {product_id}, {product.quantity} left")
        return product

    async def list_stock_history(self, product_id: int) -> List[StockHistory]:
        result = await self.db.execute(
            select(StockHistory)
            .where(StockHistory.product_id == product_id)
            .order_by(StockHistory.timestamp.desc(), StockHistory.id.desc())
        )
        return list(result.scalars().all())

    # =================
    # ORDERS
    # =================

    async def list_orders(self, district: Optional[str] = None, payment_status: Optional[str] = None) -> List[Order]:
        query = select(Order)
        if district:
            query = query.where(Order.district == district)
        if payment_status:
            query = query.where(Order.payment_status == payment_status)
        result = await self.db.execute(query.order_by(Order.created_at.desc(), Order.id.desc()))
        return list(result.scalars().all())

    async def get_order(self, order_id: int) -> Optional[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_order(self, data: Dict[str, Any]) -> Order:
        order = Order(**data)
        self.db.add(order)
        await self.db.flush()
        return order

    async def update_order(self, order_id: int, data: Dict[str, Any]) -> Optional[Order]:
        order = await self.get_order(order_id)
        if not order:
            return None

        for key in ORDER_FIELDS:
            if key in data and data[key] is not None:
                setattr(order, key, data[key])

        await self.db.flush()
        return order

    async def update_order_status(
        self,
        order_id: int,
        expected_payment: str,
        expected_order: str,
        payment_status: str,
        order_status: str
    ) -> bool:
        result = await self.db.execute(
            update(Order)
            .where(
                and_(
                    Order.id == order_id,
                    Order.payment_status == expected_payment,
                    Order.order_status == expected_order
                )
            )
            .values(payment_status=payment_status, order_status=order_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def find_pending_order_by_amount_phone(self, amount: float, phone: str) -> Optional[Order]:
        result = await self.db.execute(
            select(Order)
            .where(
                and_(
                    Order.payment_status == "Pending",
                    Order.total_amount >= amount - AMOUNT_TOLERANCE,
                    Order.total_amount <= amount + AMOUNT_TOLERANCE,
                    Order.phone.in_(phone_variants(phone))
                )
            )
            .order_by(Order.created_at, Order.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def confirm_pending_payment(self, order_id: int) -> bool:
        result = await self.db.execute(
            update(Order)
            .where(and_(Order.id == order_id, Order.payment_status == "Pending"))
            .values(payment_status="Confirmed")
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # =================
    # PAYMENTS
    # =================

    async def create_transaction(self, data: Dict[str, Any]) -> Transaction:
        transaction = Transaction(**data)
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    async def list_transactions(self, status: Optional[str] = None) -> List[Transaction]:
        query = select(Transaction)
        if status:
            query = query.where(Transaction.status == status)
        result = await self.db.execute(query.order_by(Transaction.created_at.desc(), Transaction.id.desc()))
        return list(result.scalars().all())

    async def create_raw_transaction(self, data: Dict[str, Any]) -> RawTransaction:
        raw = RawTransaction(**data)
        self.db.add(raw)
        await self.db.flush()
        return raw

    # =================
    # USERS AND ROLES
    # =================

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.registered_at, User.telegram_id))
        return list(result.scalars().all())

    async def get_user(self, telegram_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.telegram_id == telegram_id))
        return result.scalar_one_or_none()

    async def create_user(self, data: Dict[str, Any]) -> User:
        user = User(telegram_id=data["telegram_id"], **{key: data[key] for key in USER_FIELDS if key in data})
        self.db.add(user)
        await self.db.flush()
        return user

    async def update_user(self, telegram_id: str, data: Dict[str, Any]) -> Optional[User]:
        user = await self.get_user(telegram_id)
        if not user:
            return None

        for key in USER_FIELDS:
            if key in data and data[key] is not None:
                setattr(user, key, data[key])

        await self.db.flush()
        return user

    async def list_roles(self, telegram_id: Optional[str] = None) -> List[Role]:
        query = select(Role)
        if telegram_id:
            query = query.where(Role.telegram_id == telegram_id)
        result = await self.db.execute(query.order_by(Role.telegram_id, Role.role))
        return list(result.scalars().all())

    async def assign_role(self, telegram_id: str, role: str, district: Optional[str] = None) -> Role:
        await self.db.execute(
            delete(Role)
            .where(and_(Role.telegram_id == telegram_id, Role.role == role))
            .execution_options(synchronize_session="fetch")
        )
        assigned = Role(telegram_id=telegram_id, role=role, district=district)
        self.db.add(assigned)
        await self.db.flush()
        return assigned

    async def delete_role(self, telegram_id: str, role: str) -> bool:
        result = await self.db.execute(
            delete(Role)
            .where(and_(Role.telegram_id == telegram_id, Role.role == role))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    async def get_user_info(self, telegram_id: str) -> Optional[UserInfo]:
        result = await self.db.execute(select(UserInfo).where(UserInfo.telegram_id == telegram_id))
        return result.scalar_one_or_none()

    async def upsert_user_info(self, data: Dict[str, Any]) -> UserInfo:
        info = await self.get_user_info(data["telegram_id"])
        if info is None:
            info = UserInfo(telegram_id=data["telegram_id"])
            self.db.add(info)

        for key in USER_INFO_FIELDS:
            if key in data:
                setattr(info, key, data[key])

        await self.db.flush()
        return info

    # =================
    # SETTINGS
    # =================

    async def get_setting(self, key: str) -> Optional[str]:
        result = await self.db.execute(select(Setting.value).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def set_setting(self, key: str, value: str) -> Setting:
        result = await self.db.execute(select(Setting).where(Setting.key == key))
        setting = result.scalar_one_or_none()
        if setting is None:
            setting = Setting(key=key, value=value)
            self.db.add(setting)
        else:
            setting.value = value

        await self.db.flush()
        return setting

    async def list_settings(self) -> List[Setting]:
        result = await self.db.execute(select(Setting).order_by(Setting.key))
        return list(result.scalars().all())

    # =================
    # DASHBOARD
    # =================

    async def summary_counts(self, low_stock_threshold: int) -> SummaryCounts:
        total_products = select(func.count(Product.id)).scalar_subquery()
        pending_orders = (
            select(func.count(Order.id))
            .where(Order.payment_status == "Pending")
            .scalar_subquery()
        )
        low_stock_items = (
            select(func.count(Product.id))
            .where(Product.quantity < low_stock_threshold)
            .scalar_subquery()
        )
        total_revenue = (
            select(func.coalesce(func.sum(Order.total_amount), 0.0))
            .where(Order.payment_status == "Confirmed")
            .scalar_subquery()
        )

        result = await self.db.execute(
            select(total_products, pending_orders, low_stock_items, total_revenue)
        )
        row = result.one()
        return SummaryCounts(
            total_products=int(row[0] or 0),
            pending_orders=int(row[1] or 0),
            low_stock_items=int(row[2] or 0),
            total_revenue=float(row[3] or 0.0),
        )
