from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_db
from store.sql import SqlAlchemyStore


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyStore:
    """Store bound to the request's session"""
    return SqlAlchemyStore(db)
