from fastapi import HTTPException, status
from collections import defaultdict
from typing import Dict, List
import logging

from models import Role as RoleRow, User
from services.permissions import Role
from store.base import Store
from utils.response_helpers import orm_to_dict, safe_model_validate, safe_model_validate_list
from .schemas import RoleResponse, UserResponse

logger = logging.getLogger(__name__)


class UserHelpers:
    """Helper functions for user operations"""

    def user_to_response(self, user: User, roles: List[RoleRow]) -> UserResponse:
        user_data = orm_to_dict(user)
        user_data["roles"] = safe_model_validate_list(RoleResponse, roles)
        return safe_model_validate(UserResponse, user_data)

    async def users_with_roles(self, store: Store, users: List[User]) -> List[UserResponse]:
        """Attach roles using one roles query instead of one per user"""
        roles_by_user: Dict[str, List[RoleRow]] = defaultdict(list)
        for row in await store.list_roles():
            roles_by_user[row.telegram_id].append(row)

        return [self.user_to_response(user, roles_by_user[user.telegram_id]) for user in users]

    def check_profile_access(self, current_user: dict, telegram_id: str):
        """Users manage their own address profile; admins manage everyone's"""
        if current_user["telegram_id"] == telegram_id or Role.ADMIN in current_user["roles"]:
            return

        logger.warning(
            f"Profile access denied - User: {current_user['telegram_id']}, Target: {telegram_id}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own profile"
        )


user_helpers = UserHelpers()
