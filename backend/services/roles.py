"""
Role assignment. A user holds each role at most once; assigning a role
they already hold replaces the previous entry (and its district).
"""
from typing import Optional
import logging

from models import Role as RoleRow
from services.errors import NotFoundError, RoleAssignmentError
from services.permissions import DISTRICT_SCOPED_ROLES, Role
from store.base import Store

logger = logging.getLogger(__name__)


async def assign_role(store: Store, telegram_id: str, role: Role, district: Optional[str] = None) -> RoleRow:
    if not await store.get_user(telegram_id):
        raise NotFoundError("User", telegram_id)

    district = (district or "").strip() or None
    if role in DISTRICT_SCOPED_ROLES and not district:
        raise RoleAssignmentError(f"Role {role.value} requires a district")
    if role not in DISTRICT_SCOPED_ROLES:
        district = None

    try:
        assigned = await store.assign_role(telegram_id, role.value, district)
        await store.commit()
    except Exception:
        await store.rollback()
        raise

    logger.info(f"Role {role.value} assigned to {telegram_id}" + (f" for {district}" if district else ""))
    return assigned


async def revoke_role(store: Store, telegram_id: str, role: Role) -> None:
    try:
        removed = await store.delete_role(telegram_id, role.value)
        if not removed:
            raise NotFoundError("Role", f"{role.value} for user {telegram_id}")
        await store.commit()
    except Exception:
        await store.rollback()
        raise

    logger.info(f"Role {role.value} removed from {telegram_id}")
