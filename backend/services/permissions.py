"""
Role and capability model.
Pure functions over enums; FastAPI wiring lives in dependencies/rbac.py.
"""
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional
import logging

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    DISTRICT_HEAD = "district_head"
    WORKER = "worker"
    SUPPLIER = "supplier"
    CLIENT = "client"


class Action(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


# Roles whose assignment is scoped to a district
DISTRICT_SCOPED_ROLES = frozenset({Role.DISTRICT_HEAD, Role.SUPPLIER})

_R = Action.READ
_W = Action.WRITE
_D = Action.DELETE

_EVERYONE = {
    'dashboard': frozenset({_R}),
    'orders': frozenset({_R, _W}),
    'payments': frozenset({_R, _W}),
    'users/me': frozenset({_R, _W}),
}

# Admin is not listed: it holds every capability (see has_permission)
RESOURCES_FOR_ROLES: Dict[Role, Dict[str, FrozenSet[Action]]] = {
    Role.DISTRICT_HEAD: {
        **_EVERYONE,
        'products': frozenset({_R, _W, _D}),
    },
    Role.WORKER: {
        **_EVERYONE,
        'products': frozenset({_R, _W, _D}),
    },
    Role.SUPPLIER: dict(_EVERYONE),
    Role.CLIENT: dict(_EVERYONE),
}


def parse_roles(values: Iterable[str]) -> FrozenSet[Role]:
    """Map stored role strings to Role members, ignoring unknown values"""
    roles = set()
    for value in values:
        try:
            roles.add(Role(value))
        except ValueError:
            logger.warning(f"Ignoring unknown role value: {value}")
    return frozenset(roles)


def has_permission(roles: FrozenSet[Role], resource_name: str, required_permission: Action) -> bool:
    """Check if any held role grants the action on the resource"""
    if Role.ADMIN in roles:
        return True

    parent_resource = resource_name.split('/')[0]
    for role in roles:
        permissions = RESOURCES_FOR_ROLES.get(role, {})
        granted = permissions.get(resource_name)
        if granted is None:
            granted = permissions.get(parent_resource, frozenset())
        if required_permission in granted:
            return True

    return False


def can_manage_product(roles: FrozenSet[Role], telegram_id: str, added_by: str) -> bool:
    """Products can be edited by admins or by whoever added them"""
    return Role.ADMIN in roles or telegram_id == added_by


def scoped_district(roles: FrozenSet[Role], role_districts: Dict[Role, Optional[str]]) -> Optional[str]:
    """
    District a listing should default to: district heads see their own
    district, admins and everyone else see all districts.
    """
    if Role.ADMIN in roles:
        return None
    if Role.DISTRICT_HEAD in roles:
        return role_districts.get(Role.DISTRICT_HEAD)
    return None
