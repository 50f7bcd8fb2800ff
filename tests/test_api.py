from conftest import ADMIN_ID, CLIENT_ID, DISTRICT_HEAD_ID, WORKER_ID, add_order, add_product, as_user


ORDER_BODY = {
    "name": "John Doe",
    "address": "123 Main Street",
    "phone": "+919876543210",
    "district": "SouthDelhi",
    "order_details": "Name: John Doe\nAddress: 123 Main Street\nPotato 2 SouthDelhi 6338398272 1",
}


async def test_create_order_returns_201_with_computed_total(client, store, staff):
    await add_product(store, "Potato", 150, price=45)

    response = await client.post("/orders/", json={**ORDER_BODY, "total_amount": 1}, headers=as_user(CLIENT_ID))

    assert response.status_code == 201
    body = response.json()
    assert body["total_amount"] == 90
    assert body["payment_status"] == "Pending"
    assert body["order_status"] == "Processing"
    assert body["telegram_id"] == CLIENT_ID


async def test_create_order_rejections_are_400(client, store, staff):
    await add_product(store, "Potato", 1)

    insufficient = await client.post("/orders/", json=ORDER_BODY)
    assert insufficient.status_code == 400
    assert insufficient.json()["detail"] == "Insufficient stock for Potato in SouthDelhi. Available: 1, Requested: 2"

    unknown = await client.post("/orders/", json={**ORDER_BODY, "order_details": "Mango 1 SouthDelhi 6338398272 1"})
    assert unknown.status_code == 400
    assert "Mango" in unknown.json()["detail"]


async def test_create_order_missing_field_is_422(client, staff):
    body = {key: value for key, value in ORDER_BODY.items() if key != "phone"}
    response = await client.post("/orders/", json=body)
    assert response.status_code == 422


async def test_update_order_status(client, store, staff):
    order = await add_order(store, 150)

    packed = await client.put(f"/orders/{order.id}", json={"order_status": "Packed"})
    assert packed.status_code == 200
    assert packed.json()["order_status"] == "Packed"

    backwards = await client.put(f"/orders/{order.id}", json={"order_status": "Processing"})
    assert backwards.status_code == 400

    cancelled = await client.put(f"/orders/{order.id}", json={"order_status": "Cancelled"})
    assert cancelled.json()["payment_status"] == "Failed"


async def test_update_unknown_order_is_404(client, staff):
    response = await client.put("/orders/999", json={"order_status": "Packed"})
    assert response.status_code == 404


async def test_invalid_status_value_is_422(client, store, staff):
    order = await add_order(store, 150)
    response = await client.put(f"/orders/{order.id}", json={"order_status": "Shipped"})
    assert response.status_code == 422


async def test_pending_orders_listing(client, store, staff):
    await add_order(store, 150)
    await add_order(store, 80, payment_status="Confirmed")

    response = await client.get("/orders/pending")

    assert response.status_code == 200
    assert [order["total_amount"] for order in response.json()["orders"]] == [150]


async def test_parse_text_preview(client, staff):
    parsed = await client.post("/orders/parse-text", json={"order_text": ORDER_BODY["order_details"] + "\nRice 1 Chennai 1 1"})
    assert parsed.status_code == 200
    assert parsed.json()["name"] == "John Doe"
    assert len(parsed.json()["items"]) == 2

    unparseable = await client.post("/orders/parse-text", json={"order_text": "hello"})
    assert unparseable.status_code == 200
    assert unparseable.json() is None


async def test_process_sms_no_match_is_still_200(client, staff):
    response = await client.post("/payments/process-sms", json={
        "sms_text": "Rs.150 Credited by 9876543210",
        "amount": 150,
        "phone": "9876543210",
    })

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["order_id"] is None


async def test_process_sms_match(client, store, staff):
    order = await add_order(store, 150)

    response = await client.post("/payments/process-sms", json={"amount": 150, "phone": "9876543210"})

    assert response.json() == {
        "success": True,
        "message": f"Payment confirmed for Order #{order.id}",
        "order_id": order.id,
        "transaction_id": response.json()["transaction_id"],
    }


async def test_process_sms_requires_positive_amount(client, staff):
    response = await client.post("/payments/process-sms", json={"amount": 0, "phone": "9876543210"})
    assert response.status_code == 422


async def test_parse_sms(client, staff):
    ok = await client.post("/payments/parse-sms", json={"sms_text": "Rs.150 Credited by 9876543210"})
    assert ok.json() == {"amount": 150.0, "phone": "9876543210"}

    bad = await client.post("/payments/parse-sms", json={"sms_text": "hello"})
    assert bad.status_code == 400


async def test_dashboard_stats(client, store, staff):
    await add_product(store, "Potato", 150)
    await add_product(store, "Tomato", 23)

    response = await client.get("/dashboard/stats", headers=as_user(CLIENT_ID))

    assert response.status_code == 200
    assert response.json() == {
        "total_products": 2,
        "pending_orders": 0,
        "low_stock_items": 1,
        "total_revenue": 0.0,
        "low_stock_threshold": 100,
    }


async def test_admin_only_routes_are_403_for_staff(client, staff):
    for path in ("/users/", "/transactions/", "/admin/settings"):
        response = await client.get(path, headers=as_user(WORKER_ID))
        assert response.status_code == 403, path


async def test_unknown_caller_has_no_roles(client, staff):
    response = await client.get("/dashboard/stats", headers=as_user("999"))
    assert response.status_code == 403


async def test_default_identity_is_admin(client, staff):
    response = await client.get("/users/me")

    assert response.status_code == 200
    assert response.json()["telegram_id"] == ADMIN_ID
    assert response.json()["roles"] == ["admin"]


async def test_client_cannot_manage_products(client, staff):
    response = await client.post("/products/", json={
        "name": "Potato", "quantity": 5, "district": "SouthDelhi", "price": 45, "category": "vegetables"
    }, headers=as_user(CLIENT_ID))
    assert response.status_code == 403


async def test_product_edit_limited_to_owner_or_admin(client, store, staff):
    product = await add_product(store, "Potato", 5, added_by=WORKER_ID)

    other = await client.put(f"/products/{product.id}", json={"price": 50}, headers=as_user(DISTRICT_HEAD_ID))
    assert other.status_code == 403

    owner = await client.put(f"/products/{product.id}", json={"price": 50}, headers=as_user(WORKER_ID))
    assert owner.status_code == 200
    assert owner.json()["price"] == 50

    admin = await client.delete(f"/products/{product.id}")
    assert admin.status_code == 200


async def test_create_product_assigns_unique_number(client, staff):
    body = {"name": "Potato", "quantity": 5, "district": "SouthDelhi", "price": 45, "category": "vegetables"}

    first = await client.post("/products/", json=body, headers=as_user(WORKER_ID))
    second = await client.post("/products/", json=body, headers=as_user(WORKER_ID))

    assert first.status_code == 201
    assert (first.json()["unique_number"], second.json()["unique_number"]) == (1, 2)
    assert first.json()["added_by"] == WORKER_ID

    history = await client.get(f"/products/{first.json()['id']}/stock-history", headers=as_user(WORKER_ID))
    assert [entry["action"] for entry in history.json()] == ["ADD"]


async def test_district_head_sees_own_district(client, store, staff):
    await add_product(store, "Potato", 5, "SouthDelhi")
    await add_product(store, "Rice", 5, "Chennai")

    scoped = await client.get("/products/", headers=as_user(DISTRICT_HEAD_ID))
    everything = await client.get("/products/")

    assert [p["name"] for p in scoped.json()["products"]] == ["Potato"]
    assert everything.json()["total"] == 2


async def test_unknown_product_is_404(client, staff):
    response = await client.get("/products/999")
    assert response.status_code == 404


async def test_role_assignment_endpoints(client, staff):
    replaced = await client.post("/admin/roles", json={
        "telegram_id": WORKER_ID, "role": "district_head", "district": "Chennai"
    })
    assert replaced.status_code == 201

    again = await client.post("/admin/roles", json={
        "telegram_id": WORKER_ID, "role": "district_head", "district": "SouthDelhi"
    })
    assert again.status_code == 201

    roles = await client.get("/admin/roles", params={"telegram_id": WORKER_ID})
    assert sorted((r["role"], r["district"]) for r in roles.json()) == [
        ("district_head", "SouthDelhi"), ("worker", None)
    ]

    missing_district = await client.post("/admin/roles", json={"telegram_id": WORKER_ID, "role": "supplier"})
    assert missing_district.status_code == 400

    unknown_user = await client.post("/admin/roles", json={"telegram_id": "404", "role": "worker"})
    assert unknown_user.status_code == 404

    removed = await client.delete("/admin/roles", params={"telegram_id": WORKER_ID, "role": "district_head"})
    assert removed.status_code == 200


async def test_settings_roundtrip_and_validation(client, staff):
    default = await client.get("/admin/settings/low_stock_threshold")
    assert default.json() == {"key": "low_stock_threshold", "value": "100"}

    updated = await client.put("/admin/settings", json={"key": "low_stock_threshold", "value": "25"})
    assert updated.status_code == 200

    stats = await client.get("/dashboard/stats")
    assert stats.json()["low_stock_threshold"] == 25

    invalid = await client.put("/admin/settings", json={"key": "order_timeout", "value": "soon"})
    assert invalid.status_code == 400

    missing = await client.get("/admin/settings/unknown_key")
    assert missing.status_code == 404


async def test_transactions_listing(client, store, staff):
    await client.post("/payments/process-sms", json={"amount": 10, "phone": "9876543210"})

    unmatched = await client.get("/transactions/unmatched")
    assert unmatched.status_code == 200
    assert unmatched.json()[0]["status"] == "Unmatched"


async def test_user_info_is_private(client, staff):
    body = {
        "name": "John Doe",
        "house_name": "Green Villa",
        "district": "SouthDelhi",
        "state": "Delhi",
        "primary_phone": "9876543210",
    }

    saved = await client.put(f"/users/{CLIENT_ID}/info", json=body, headers=as_user(CLIENT_ID))
    assert saved.status_code == 200
    assert saved.json()["house_name"] == "Green Villa"

    other = await client.get(f"/users/{CLIENT_ID}/info", headers=as_user(WORKER_ID))
    assert other.status_code == 403

    admin = await client.get(f"/users/{CLIENT_ID}/info")
    assert admin.status_code == 200


async def test_user_management(client, staff):
    created = await client.post("/users/", json={
        "telegram_id": "3333333333", "name": "New Worker", "primary_phone": "9000000000", "district": "Chennai"
    })
    assert created.status_code == 201

    duplicate = await client.post("/users/", json={
        "telegram_id": "3333333333", "name": "New Worker", "primary_phone": "9000000000", "district": "Chennai"
    })
    assert duplicate.status_code == 409

    listing = await client.get("/users/")
    assert listing.json()["total"] == 5
    admin_entry = next(user for user in listing.json()["users"] if user["telegram_id"] == ADMIN_ID)
    assert [role["role"] for role in admin_entry["roles"]] == ["admin"]


async def test_health_reports_database(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "healthy"


async def test_openapi_servers_without_public_url(client):
    response = await client.get("/openapi.json")

    assert [server["url"] for server in response.json()["servers"]] == ["http://localhost:8000"]
