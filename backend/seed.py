"""
Demo rows for a fresh database: an admin, a district head, default settings
and a few products. Skipped when any user or product already exists.
"""
import logging

from config import (
    AsyncSessionLocal, DEFAULT_LOW_STOCK_THRESHOLD, DEFAULT_ORDER_TIMEOUT_HOURS,
    DEFAULT_TELEGRAM_ID, LOW_STOCK_THRESHOLD_KEY, ORDER_TIMEOUT_KEY
)
from services.permissions import Role
from store.base import Store
from store.sql import SqlAlchemyStore

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {
        "telegram_id": DEFAULT_TELEGRAM_ID,
        "name": "Harshit Sharma",
        "primary_phone": "9876543210",
        "district": "SouthDelhi",
        "role": Role.ADMIN,
        "role_district": None,
    },
    {
        "telegram_id": "5385320149",
        "name": "Raj Singh",
        "primary_phone": "9876543211",
        "district": "SouthDelhi",
        "role": Role.DISTRICT_HEAD,
        "role_district": "SouthDelhi",
    },
]

DEMO_PRODUCTS = [
    {"name": "Potato", "quantity": 150, "district": "SouthDelhi", "price": 45, "category": "vegetables"},
    {"name": "Tomato", "quantity": 23, "district": "CentralDelhi", "price": 80, "category": "vegetables"},
    {"name": "Rice", "quantity": 67, "district": "Chennai", "price": 120, "category": "grains"},
]


async def seed_defaults(store: Store) -> bool:
    """Insert demo data into an empty store; returns whether anything was written"""
    if await store.list_users() or await store.list_products():
        logger.debug("Store already has data, skipping seed")
        return False

    try:
        for entry in DEMO_USERS:
            user_data = {key: value for key, value in entry.items() if not key.startswith("role")}
            await store.create_user(user_data)
            await store.assign_role(entry["telegram_id"], entry["role"].value, entry["role_district"])

        await store.set_setting(LOW_STOCK_THRESHOLD_KEY, str(DEFAULT_LOW_STOCK_THRESHOLD))
        await store.set_setting(ORDER_TIMEOUT_KEY, str(DEFAULT_ORDER_TIMEOUT_HOURS))

        for product in DEMO_PRODUCTS:
            await store.create_product({**product, "added_by": DEFAULT_TELEGRAM_ID})

        await store.commit()
    except Exception:
        await store.rollback()
        raise

    logger.info(f"Seeded {len(DEMO_USERS)} users and {len(DEMO_PRODUCTS)} products")
    return True


async def seed_database():
    async with AsyncSessionLocal() as session:
        await seed_defaults(SqlAlchemyStore(session))
