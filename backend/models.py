from sqlalchemy import (
    String,
    Text,
    DateTime,
    CheckConstraint,
    PrimaryKeyConstraint,
    Index,
    JSON,
    text,
    func,
    ForeignKey,
    Float,
    Integer
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship, declarative_base
from typing import Optional, List
from datetime import datetime, timezone

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    Catalog entry for one lot of goods in one district.
    (lower(name), district, unique_number) identifies a lot; unique_number is
    assigned by the store, counting up per name + district.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative_check"),
        CheckConstraint("price >= 0", name="price_non_negative_check"),
        Index("ix_products_district", "district"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    added_by: Mapped[str] = mapped_column(String(50), nullable=False)  # telegram id
    price: Mapped[float] = mapped_column(Float, nullable=False)  # per mass unit
    unique_number: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


Index(
    "uq_product_identity",
    func.lower(Product.name),
    Product.district,
    Product.unique_number,
    unique=True
)


class StockHistory(Base):
    """
    Append-only audit trail of stock-affecting mutations.
    Kept after product deletion, so product_id carries no foreign key.
    """
    __tablename__ = "stock_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # ADD, UPDATE, DEDUCT, DELETE
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


class Order(Base):
    """
    Customer order. total_amount, product_ids and items are computed at intake
    from order_details and never taken from the client.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="total_amount_non_negative_check"),
        Index("ix_orders_payment_amount", "payment_status", "total_amount"),
        Index("ix_orders_district", "district"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Customer
    telegram_id: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    district: Mapped[str] = mapped_column(String(100), nullable=False)

    # Raw text kept for audit/display
    order_details: Mapped[str] = mapped_column(Text, nullable=False)
    product_ids: Mapped[List[int]] = mapped_column(JSONType, nullable=False, default=list)
    items: Mapped[Optional[list]] = mapped_column(JSONType)  # per-line snapshot
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)

    payment_status: Mapped[str] = mapped_column(String(20), default="Pending", nullable=False)  # Pending, Confirmed, Failed
    order_status: Mapped[str] = mapped_column(String(20), default="Processing", nullable=False)  # Processing, Packed, Delivered, Cancelled

    date_ordered: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    transactions: Mapped[List["Transaction"]] = relationship("Transaction", back_populates="order")


class Transaction(Base):
    """
    Ledger row for one processed payment notification. Append-only.
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    sender_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    sms_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    upi_id: Mapped[Optional[str]] = mapped_column(String(100))
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100))  # bank/UPI reference
    order_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("orders.id", ondelete="SET NULL"),
        index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # Matched, Unmatched
    note: Mapped[Optional[str]] = mapped_column(Text)

    date_received: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    order: Mapped[Optional["Order"]] = relationship("Order", back_populates="transactions")


class RawTransaction(Base):
    """
    Payment SMS exactly as submitted, with the outcome of matching it.
    """
    __tablename__ = "raw_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sms_text: Mapped[str] = mapped_column(Text, nullable=False)
    sender_id: Mapped[str] = mapped_column(String(50), nullable=False)  # who forwarded it
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


class User(Base):
    """
    Telegram user known to the console
    """
    __tablename__ = "users"

    telegram_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    primary_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    secondary_phone: Mapped[Optional[str]] = mapped_column(String(20))
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    language: Mapped[str] = mapped_column(String(30), default="English", nullable=False)

    registered_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        back_populates="user",
        cascade="all, delete-orphan"
    )


class Role(Base):
    """
    Role held by a user. One row per (telegram_id, role); district only
    matters for district_head and supplier.
    """
    __tablename__ = "roles"
    __table_args__ = (
        PrimaryKeyConstraint("telegram_id", "role", name="roles_pkey"),
    )

    telegram_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("users.telegram_id", ondelete="CASCADE"),
        nullable=False
    )
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    district: Mapped[Optional[str]] = mapped_column(String(100))

    user: Mapped["User"] = relationship("User", back_populates="roles")


class Setting(Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class UserInfo(Base):
    """
    Delivery address profile, upserted as a whole
    """
    __tablename__ = "user_info"

    telegram_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Address
    house_name: Mapped[Optional[str]] = mapped_column(String(200))
    landmark: Mapped[Optional[str]] = mapped_column(String(200))
    ward_no: Mapped[Optional[str]] = mapped_column(String(50))
    panchayat: Mapped[Optional[str]] = mapped_column(String(100))
    block: Mapped[Optional[str]] = mapped_column(String(100))
    sub_district: Mapped[Optional[str]] = mapped_column(String(100))
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)

    # Contact
    primary_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    secondary_phone: Mapped[Optional[str]] = mapped_column(String(20))

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
