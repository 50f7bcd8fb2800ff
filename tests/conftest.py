import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SEED_DEFAULT_DATA", "false")
os.environ.pop("PUBLIC_API_URL", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from config import get_db, make_async_engine
from main import app
from models import Base
from store.sql import SqlAlchemyStore

ADMIN_ID = "6338398272"
DISTRICT_HEAD_ID = "5385320149"
WORKER_ID = "1111111111"
CLIENT_ID = "2222222222"


@pytest.fixture
async def engine(tmp_path):
    engine = make_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'kaamdhenu_test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def store(session_factory):
    async with session_factory() as session:
        yield SqlAlchemyStore(session)


@pytest.fixture
async def make_store(session_factory):
    """Stores on independent sessions, for concurrency tests"""
    sessions = []

    def factory():
        session = session_factory()
        sessions.append(session)
        return SqlAlchemyStore(session)

    yield factory
    for session in sessions:
        await session.close()


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def add_product(store, name="Potato", quantity=150, district="SouthDelhi", price=45.0,
                      category="vegetables", added_by=ADMIN_ID):
    product = await store.create_product({
        "name": name,
        "quantity": quantity,
        "district": district,
        "price": price,
        "category": category,
        "added_by": added_by,
    })
    await store.commit()
    return product


async def add_user(store, telegram_id, role=None, district="SouthDelhi", name="Test User"):
    user = await store.create_user({
        "telegram_id": telegram_id,
        "name": name,
        "primary_phone": "9876543210",
        "district": district,
    })
    if role:
        role_district = district if role in ("district_head", "supplier") else None
        await store.assign_role(telegram_id, role, role_district)
    await store.commit()
    return user


@pytest.fixture
async def staff(store):
    """Admin, district head, worker and client users"""
    await add_user(store, ADMIN_ID, "admin", name="Harshit Sharma")
    await add_user(store, DISTRICT_HEAD_ID, "district_head", name="Raj Singh")
    await add_user(store, WORKER_ID, "worker", district="Chennai")
    await add_user(store, CLIENT_ID, "client", district="Chennai")


def as_user(telegram_id):
    return {"X-Telegram-Id": telegram_id}


async def add_order(store, total_amount, phone="+919876543210", payment_status="Pending",
                    order_status="Processing", district="SouthDelhi"):
    order = await store.create_order({
        "telegram_id": ADMIN_ID,
        "name": "John Doe",
        "address": "123 Main Street",
        "phone": phone,
        "district": district,
        "order_details": "Potato 2 SouthDelhi 6338398272 1",
        "product_ids": [1],
        "items": [],
        "total_amount": total_amount,
        "payment_status": payment_status,
        "order_status": order_status,
    })
    await store.commit()
    return order
