import asyncio

import pytest

from conftest import ADMIN_ID, add_product
from services.errors import EmptyOrder, InsufficientStock, KaamDhenuError, OrderItemNotFound
from services.order_intake import OrderIntake, OrderSubmission


def submission(order_details, phone="+919876543210"):
    return OrderSubmission(
        telegram_id=ADMIN_ID,
        name="John Doe",
        address="123 Main Street",
        phone=phone,
        district="SouthDelhi",
        order_details=order_details,
    )


async def test_places_order_with_computed_total(store):
    potato = await add_product(store, "Potato", 150, "SouthDelhi", 45)
    tomato = await add_product(store, "Tomato", 23, "CentralDelhi", 80)

    order = await OrderIntake(store).place_order(submission(
        "Name: John Doe\nAddress: 123 Main Street\n"
        "Potato 2 SouthDelhi 6338398272 1\n"
        "Tomato 1 CentralDelhi 6338398272 1"
    ))

    assert order.total_amount == 170
    assert order.product_ids == [potato.id, tomato.id]
    assert order.payment_status == "Pending"
    assert order.order_status == "Processing"
    assert [item["line_total"] for item in order.items] == [90, 80]

    assert (await store.get_product(potato.id)).quantity == 148
    assert (await store.get_product(tomato.id)).quantity == 22


async def test_product_name_lookup_is_case_insensitive(store):
    await add_product(store, "Potato", 10)

    order = await OrderIntake(store).place_order(submission("potato 1 SouthDelhi 6338398272 1"))
    assert order.total_amount == 45


async def test_unknown_product_rejects_whole_order(store):
    potato = await add_product(store, "Potato", 150)
    potato_id = potato.id

    with pytest.raises(OrderItemNotFound) as exc_info:
        await OrderIntake(store).place_order(submission(
            "Potato 2 SouthDelhi 6338398272 1\nMango 1 SouthDelhi 6338398272 1"
        ))

    assert exc_info.value.message == "Product Mango not found in SouthDelhi with unique number 1"
    assert (await store.get_product(potato_id)).quantity == 150
    assert await store.list_orders() == []


async def test_insufficient_stock_leaves_stock_unchanged(store):
    potato = await add_product(store, "Potato", 150)
    tomato = await add_product(store, "Tomato", 23, "CentralDelhi", 80)
    potato_id, tomato_id = potato.id, tomato.id

    with pytest.raises(InsufficientStock) as exc_info:
        await OrderIntake(store).place_order(submission(
            "Potato 5 SouthDelhi 6338398272 1\nTomato 50 CentralDelhi 6338398272 1"
        ))

    assert exc_info.value.message == "Insufficient stock for Tomato in CentralDelhi. Available: 23, Requested: 50"
    assert (await store.get_product(potato_id)).quantity == 150
    assert (await store.get_product(tomato_id)).quantity == 23
    assert await store.list_orders() == []


async def test_repeated_lines_count_against_same_stock(store):
    potato = await add_product(store, "Potato", 5)
    potato_id = potato.id

    with pytest.raises(InsufficientStock) as exc_info:
        await OrderIntake(store).place_order(submission(
            "Potato 3 SouthDelhi 6338398272 1\nPotato 3 SouthDelhi 6338398272 1"
        ))

    assert exc_info.value.available == 2
    assert (await store.get_product(potato_id)).quantity == 5


async def test_exact_stock_can_be_ordered(store):
    potato = await add_product(store, "Potato", 2)

    await OrderIntake(store).place_order(submission("Potato 2 SouthDelhi 6338398272 1"))
    assert (await store.get_product(potato.id)).quantity == 0


async def test_order_without_items_is_rejected(store):
    with pytest.raises(EmptyOrder):
        await OrderIntake(store).place_order(submission("Name: John Doe\nAddress: 123 Main Street"))


async def test_malformed_item_line_is_rejected(store):
    await add_product(store, "Potato", 10)

    with pytest.raises(KaamDhenuError):
        await OrderIntake(store).place_order(submission("Potato lots SouthDelhi 6338398272 1"))


async def test_deduction_is_recorded_in_stock_history(store):
    potato = await add_product(store, "Potato", 10)

    await OrderIntake(store).place_order(submission("Potato 4 SouthDelhi 6338398272 1"))

    history = await store.list_stock_history(potato.id)
    assert [(entry.action, entry.quantity) for entry in history] == [("DEDUCT", 4), ("ADD", 10)]


async def test_concurrent_orders_never_oversell(store, make_store):
    potato = await add_product(store, "Potato", 10)

    async def place():
        try:
            await OrderIntake(make_store()).place_order(submission("Potato 1 SouthDelhi 6338398272 1"))
            return True
        except InsufficientStock:
            return False

    results = await asyncio.gather(*(place() for _ in range(25)))

    assert results.count(True) == 10
    assert (await store.get_product(potato.id)).quantity == 0
    assert len(await store.list_orders()) == 10
