"""
Current user resolution.

There is no login flow: the caller names itself with the X-Telegram-Id
header, falling back to DEFAULT_TELEGRAM_ID. Roles come from the roles table.
"""
from fastapi import Depends, Header, Request
from typing import Optional
import logging

from config import DEFAULT_TELEGRAM_ID
from dependencies.store import get_store
from services.permissions import parse_roles
from store.base import Store

logger = logging.getLogger(__name__)


async def get_current_user(
    request: Request,
    x_telegram_id: Optional[str] = Header(None),
    store: Store = Depends(get_store)
) -> dict:
    """Resolve the acting user and their roles"""
    telegram_id = (x_telegram_id or DEFAULT_TELEGRAM_ID).strip()

    role_rows = await store.list_roles(telegram_id)
    roles = parse_roles(row.role for row in role_rows)
    role_districts = {
        role: row.district
        for row in role_rows
        for role in roles
        if role.value == row.role
    }

    user = await store.get_user(telegram_id)

    current_user = {
        "telegram_id": telegram_id,
        "name": user.name if user else None,
        "district": user.district if user else None,
        "roles": roles,
        "role_districts": role_districts,
    }
    request.state.current_user = current_user

    if not user:
        logger.debug(f"Request from unregistered telegram id {telegram_id}")
    return current_user
