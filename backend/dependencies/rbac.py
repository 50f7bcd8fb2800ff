"""
RBAC dependencies for FastAPI routes
Role-based access control implemented as dependencies that run after the current user is resolved
"""
from fastapi import Depends, HTTPException, status
import logging

from dependencies.current_user import get_current_user
from services.permissions import Action, has_permission

logger = logging.getLogger(__name__)


def require_permission(resource: str, permission: Action):
    """
    Create an RBAC dependency that checks permissions

    Args:
        resource: Resource name from RESOURCES_FOR_ROLES
        permission: Action the route needs on that resource
    """
    def check_rbac(current_user: dict = Depends(get_current_user)):
        """RBAC dependency function"""
        roles = current_user["roles"]
        role_names = sorted(role.value for role in roles)

        if not has_permission(roles, resource, permission):
            logger.warning(
                f"Access denied - User: {current_user['telegram_id']}, Roles: {role_names}, "
                f"Resource: {resource}, Permission: {permission.value}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Roles {role_names or ['none']} do not have "
                       f"{permission.value} permission for {resource}"
            )

        logger.debug(f"Access granted - User: {current_user['telegram_id']}, Resource: {resource}")
        return True

    return check_rbac


# Dashboard
require_dashboard_read = require_permission("dashboard", Action.READ)

# Products
require_product_read = require_permission("products", Action.READ)
require_product_write = require_permission("products", Action.WRITE)
require_product_delete = require_permission("products", Action.DELETE)

# Orders
require_order_read = require_permission("orders", Action.READ)
require_order_write = require_permission("orders", Action.WRITE)

# Payments
require_payment_write = require_permission("payments", Action.WRITE)

# Own profile
require_profile_read = require_permission("users/me", Action.READ)
require_profile_write = require_permission("users/me", Action.WRITE)

# Admin only
require_user_management = require_permission("users", Action.READ)
require_user_management_write = require_permission("users", Action.WRITE)
require_role_management = require_permission("roles", Action.WRITE)
require_role_management_delete = require_permission("roles", Action.DELETE)
require_transactions_read = require_permission("transactions", Action.READ)
require_settings = require_permission("settings", Action.READ)
require_settings_write = require_permission("settings", Action.WRITE)
