import os
import logging
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from models import Base

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./kaamdhenu.db")
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
DEBUG = ENVIRONMENT == "dev"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
# Deployed API Gateway stage URL, listed in the OpenAPI servers when set
PUBLIC_API_URL = os.getenv("PUBLIC_API_URL")

# Mocked identity used when a request carries no X-Telegram-Id header
DEFAULT_TELEGRAM_ID = os.getenv("DEFAULT_TELEGRAM_ID", "6338398272")
SEED_DEFAULT_DATA = os.getenv("SEED_DEFAULT_DATA", "true" if DEBUG else "false").lower() in ("1", "true", "yes")

LOW_STOCK_THRESHOLD_KEY = "low_stock_threshold"
DEFAULT_LOW_STOCK_THRESHOLD = 100
ORDER_TIMEOUT_KEY = "order_timeout"
DEFAULT_ORDER_TIMEOUT_HOURS = 6


def configure_logging(level: str = None):
    """Configure root logging once for the API process"""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def build_async_url(database_url: str) -> str:
    """Normalize a database URL to its async driver form"""
    if database_url.startswith("sqlite"):
        if "+aiosqlite" not in database_url:
            database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return database_url

    asyncpg_url = database_url.replace("postgresql://", "postgresql+asyncpg://")

    if "?" in asyncpg_url:
        base_url = asyncpg_url.split("?")[0]
    else:
        base_url = asyncpg_url

    return f"{base_url}?prepared_statement_cache_size=0"


def build_sync_url(database_url: str) -> str:
    return (
        database_url
        .replace("postgresql+asyncpg://", "postgresql://")
        .replace("sqlite+aiosqlite://", "sqlite://")
    )


def make_async_engine(database_url: str, **kwargs):
    async_url = build_async_url(database_url)
    if async_url.startswith("sqlite"):
        # Writers queue on the sqlite lock instead of failing fast
        kwargs.setdefault("connect_args", {"timeout": 30})
        return create_async_engine(async_url, echo=False, **kwargs)

    return create_async_engine(
        async_url,
        echo=False,
        pool_pre_ping=False,
        pool_size=5,
        max_overflow=0,
        **kwargs
    )


if DATABASE_URL:
    sync_engine = create_engine(build_sync_url(DATABASE_URL))
    async_engine = make_async_engine(DATABASE_URL)

    AsyncSessionLocal = sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
else:
    sync_engine = None
    async_engine = None
    AsyncSessionLocal = None

async def get_db():
    if AsyncSessionLocal is None:
        raise Exception("Database not configured")
    async with AsyncSessionLocal() as session:
        yield session

async def init_db():
    if async_engine is None:
        raise Exception("Database not configured")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

def get_sync_engine():
    if sync_engine is None:
        raise Exception("Database not configured")
    return sync_engine
