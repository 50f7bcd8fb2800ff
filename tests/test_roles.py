import pytest

from conftest import add_user
from services.errors import NotFoundError, RoleAssignmentError
from services.permissions import Role
from services.roles import assign_role, revoke_role


async def test_reassigning_role_replaces_entry(store):
    await add_user(store, "100")

    await assign_role(store, "100", Role.DISTRICT_HEAD, "SouthDelhi")
    await assign_role(store, "100", Role.DISTRICT_HEAD, "Chennai")

    roles = await store.list_roles("100")
    assert [(row.role, row.district) for row in roles] == [("district_head", "Chennai")]


async def test_user_can_hold_several_roles(store):
    await add_user(store, "100")

    await assign_role(store, "100", Role.WORKER)
    await assign_role(store, "100", Role.SUPPLIER, "SouthDelhi")

    assert sorted(row.role for row in await store.list_roles("100")) == ["supplier", "worker"]


async def test_district_required_for_scoped_roles(store):
    await add_user(store, "100")

    with pytest.raises(RoleAssignmentError):
        await assign_role(store, "100", Role.DISTRICT_HEAD)
    assert await store.list_roles("100") == []


async def test_district_dropped_for_unscoped_roles(store):
    await add_user(store, "100")

    assigned = await assign_role(store, "100", Role.WORKER, "SouthDelhi")
    assert assigned.district is None


async def test_unknown_user(store):
    with pytest.raises(NotFoundError):
        await assign_role(store, "404", Role.ADMIN)


async def test_revoke_role(store):
    await add_user(store, "100", "worker")

    await revoke_role(store, "100", Role.WORKER)
    assert await store.list_roles("100") == []

    with pytest.raises(NotFoundError):
        await revoke_role(store, "100", Role.WORKER)
