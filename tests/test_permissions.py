from services.permissions import (
    Action, Role, can_manage_product, has_permission, parse_roles, scoped_district
)


def test_admin_has_every_capability():
    roles = frozenset({Role.ADMIN})
    for resource in ("dashboard", "products", "orders", "users", "roles", "transactions", "settings", "anything"):
        for action in Action:
            assert has_permission(roles, resource, action)


def test_products_for_district_head_and_worker_only():
    for role in (Role.DISTRICT_HEAD, Role.WORKER):
        assert has_permission(frozenset({role}), "products", Action.WRITE)
    for role in (Role.SUPPLIER, Role.CLIENT):
        assert not has_permission(frozenset({role}), "products", Action.READ)


def test_admin_only_resources():
    non_admin = frozenset({Role.DISTRICT_HEAD, Role.WORKER, Role.SUPPLIER, Role.CLIENT})
    for resource in ("users", "roles", "transactions", "settings"):
        assert not has_permission(non_admin, resource, Action.READ)


def test_everyone_can_order_and_pay():
    for role in (Role.DISTRICT_HEAD, Role.WORKER, Role.SUPPLIER, Role.CLIENT):
        roles = frozenset({role})
        assert has_permission(roles, "dashboard", Action.READ)
        assert has_permission(roles, "orders", Action.WRITE)
        assert has_permission(roles, "payments", Action.WRITE)
        assert has_permission(roles, "users/me", Action.WRITE)


def test_no_roles_no_access():
    assert not has_permission(frozenset(), "dashboard", Action.READ)


def test_any_held_role_suffices():
    assert has_permission(frozenset({Role.CLIENT, Role.WORKER}), "products", Action.DELETE)


def test_parse_roles_ignores_unknown():
    assert parse_roles(["admin", "wizard", "worker"]) == frozenset({Role.ADMIN, Role.WORKER})


def test_product_management_by_owner_or_admin():
    assert can_manage_product(frozenset({Role.WORKER}), "111", "111")
    assert not can_manage_product(frozenset({Role.WORKER}), "111", "222")
    assert can_manage_product(frozenset({Role.ADMIN}), "111", "222")


def test_scoped_district():
    districts = {Role.DISTRICT_HEAD: "SouthDelhi"}
    assert scoped_district(frozenset({Role.DISTRICT_HEAD}), districts) == "SouthDelhi"
    assert scoped_district(frozenset({Role.ADMIN, Role.DISTRICT_HEAD}), districts) is None
    assert scoped_district(frozenset({Role.WORKER}), {}) is None
