from fastapi import APIRouter, Depends, HTTPException, status
from dependencies.current_user import get_current_user
from dependencies.rbac import (
    require_profile_read, require_profile_write,
    require_user_management, require_user_management_write
)
from dependencies.store import get_store
from store.base import Store
from utils.response_helpers import safe_model_validate
from .schemas import (
    UserCreate, UserUpdate, UserResponse, UserListResponse, CurrentUserResponse,
    UserInfoUpdate, UserInfoResponse
)
from .helpers import user_helpers
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


# =================
# CURRENT USER
# =================

@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_profile(
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_profile_read)
):
    """Who the console is acting as, with the roles that gate the UI"""
    return CurrentUserResponse(
        telegram_id=current_user["telegram_id"],
        name=current_user["name"],
        district=current_user["district"],
        roles=sorted(current_user["roles"], key=lambda role: role.value),
        registered=current_user["name"] is not None
    )


@router.put("/me", response_model=UserResponse)
async def update_current_user_profile(
    user_update: UserUpdate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_profile_write)
):
    """Update the current user's own record"""
    try:
        user = await store.update_user(current_user["telegram_id"], user_update.model_dump(exclude_unset=True))
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not registered"
            )
        await store.commit()

        roles = await store.list_roles(user.telegram_id)
        return user_helpers.user_to_response(user, roles)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating own profile: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile"
        )


# =================
# USER MANAGEMENT (ADMIN)
# =================

@router.get("/", response_model=UserListResponse)
async def list_users(
    store: Store = Depends(get_store),
    _: bool = Depends(require_user_management)
):
    """Admin only: all users with their roles"""
    try:
        users = await store.list_users()
        return UserListResponse(
            users=await user_helpers.users_with_roles(store, users),
            total=len(users)
        )

    except Exception as e:
        logger.error(f"List users failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve users"
        )


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    store: Store = Depends(get_store),
    _: bool = Depends(require_user_management_write)
):
    """Admin only: register a telegram user"""
    try:
        if await store.get_user(user_data.telegram_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already exists"
            )

        user = await store.create_user(user_data.model_dump())
        await store.commit()

        logger.info(f"User {user.telegram_id} registered")
        return user_helpers.user_to_response(user, [])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Create user failed: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user"
        )


@router.get("/{telegram_id}", response_model=UserResponse)
async def get_user(
    telegram_id: str,
    store: Store = Depends(get_store),
    _: bool = Depends(require_user_management)
):
    """Admin only: one user with roles"""
    try:
        user = await store.get_user(telegram_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return user_helpers.user_to_response(user, await store.list_roles(telegram_id))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get user {telegram_id} failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user"
        )


@router.put("/{telegram_id}", response_model=UserResponse)
async def update_user(
    telegram_id: str,
    user_update: UserUpdate,
    store: Store = Depends(get_store),
    _: bool = Depends(require_user_management_write)
):
    """Admin only: update a user record"""
    try:
        user = await store.update_user(telegram_id, user_update.model_dump(exclude_unset=True))
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        await store.commit()

        return user_helpers.user_to_response(user, await store.list_roles(telegram_id))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update user {telegram_id} failed: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update user"
        )


# =================
# ADDRESS PROFILE
# =================

@router.get("/{telegram_id}/info", response_model=UserInfoResponse)
async def get_user_info(
    telegram_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_profile_read)
):
    """Delivery address profile"""
    try:
        user_helpers.check_profile_access(current_user, telegram_id)

        info = await store.get_user_info(telegram_id)
        if not info:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User info not found"
            )
        return safe_model_validate(UserInfoResponse, info)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get user info {telegram_id} failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user info"
        )


@router.put("/{telegram_id}/info", response_model=UserInfoResponse)
async def upsert_user_info(
    telegram_id: str,
    info_data: UserInfoUpdate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_profile_write)
):
    """Create or replace the delivery address profile"""
    try:
        user_helpers.check_profile_access(current_user, telegram_id)

        data = info_data.model_dump()
        data["telegram_id"] = telegram_id
        info = await store.upsert_user_info(data)
        await store.commit()

        return safe_model_validate(UserInfoResponse, info)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Upsert user info {telegram_id} failed: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save user info"
        )
