from fastapi import APIRouter, Depends, HTTPException, status, Query
from config import DEFAULT_LOW_STOCK_THRESHOLD, DEFAULT_ORDER_TIMEOUT_HOURS, LOW_STOCK_THRESHOLD_KEY, ORDER_TIMEOUT_KEY
from dependencies.rbac import (
    require_role_management, require_role_management_delete,
    require_settings, require_settings_write, require_user_management
)
from dependencies.store import get_store
from routers.users.schemas import RoleResponse
from services.errors import KaamDhenuError
from services.permissions import Role
from services.roles import assign_role, revoke_role
from store.base import Store
from utils.response_helpers import http_error_for, safe_model_validate, safe_model_validate_list
from .schemas import RoleAssignRequest, SettingUpdate, SettingResponse
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

# Settings that must hold a whole number, with the smallest accepted value
NUMERIC_SETTINGS = {
    LOW_STOCK_THRESHOLD_KEY: 0,
    ORDER_TIMEOUT_KEY: 1,
}

SETTING_DEFAULTS = {
    LOW_STOCK_THRESHOLD_KEY: str(DEFAULT_LOW_STOCK_THRESHOLD),
    ORDER_TIMEOUT_KEY: str(DEFAULT_ORDER_TIMEOUT_HOURS),
}


# =================
# ROLES
# =================

@router.get("/roles", response_model=List[RoleResponse])
async def list_roles(
    telegram_id: Optional[str] = Query(None),
    store: Store = Depends(get_store),
    _: bool = Depends(require_user_management)
):
    """Admin only: role assignments, optionally for one user"""
    try:
        roles = await store.list_roles(telegram_id)
        return safe_model_validate_list(RoleResponse, roles)

    except Exception as e:
        logger.error(f"List roles failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve roles"
        )


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def assign_user_role(
    request: RoleAssignRequest,
    store: Store = Depends(get_store),
    _: bool = Depends(require_role_management)
):
    """
    Admin only: assign a role. Re-assigning a role the user already holds
    replaces it, so the district can be moved without a duplicate entry.
    """
    try:
        assigned = await assign_role(store, request.telegram_id, request.role, request.district)
        return safe_model_validate(RoleResponse, assigned)

    except KaamDhenuError as e:
        logger.warning(f"Role assignment rejected: {e.message}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Assign role failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign role"
        )


@router.delete("/roles")
async def remove_user_role(
    telegram_id: str = Query(...),
    role: Role = Query(...),
    store: Store = Depends(get_store),
    _: bool = Depends(require_role_management_delete)
):
    """Admin only: remove one role from a user"""
    try:
        await revoke_role(store, telegram_id, role)
        return {"message": "Role removed successfully"}

    except KaamDhenuError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Remove role failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove role"
        )


# =================
# SETTINGS
# =================

@router.get("/settings", response_model=List[SettingResponse])
async def list_settings(
    store: Store = Depends(get_store),
    _: bool = Depends(require_settings)
):
    """Admin only: all settings, with defaults for known keys never saved"""
    try:
        stored = {setting.key: setting.value for setting in await store.list_settings()}
        merged = {**SETTING_DEFAULTS, **stored}
        return [SettingResponse(key=key, value=value) for key, value in sorted(merged.items())]

    except Exception as e:
        logger.error(f"List settings failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve settings"
        )


@router.get("/settings/{key}", response_model=SettingResponse)
async def get_setting(
    key: str,
    store: Store = Depends(get_store),
    _: bool = Depends(require_settings)
):
    """Admin only: one setting"""
    try:
        value = await store.get_setting(key)
        if value is None:
            value = SETTING_DEFAULTS.get(key)
        if value is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Setting not found"
            )
        return SettingResponse(key=key, value=value)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get setting {key} failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve setting"
        )


@router.put("/settings", response_model=SettingResponse)
async def update_setting(
    request: SettingUpdate,
    store: Store = Depends(get_store),
    _: bool = Depends(require_settings_write)
):
    """Admin only: create or overwrite a setting"""
    try:
        value = request.value.strip()
        if request.key in NUMERIC_SETTINGS:
            minimum = NUMERIC_SETTINGS[request.key]
            if not value.isdigit() or int(value) < minimum:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"{request.key} must be a whole number of at least {minimum}"
                )

        setting = await store.set_setting(request.key, value)
        await store.commit()

        logger.info(f"Setting {request.key} set to {value}")
        return safe_model_validate(SettingResponse, setting)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update setting {request.key} failed: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update setting"
        )
