from conftest import add_order, add_product
from services.dashboard import DashboardAggregator, parse_threshold


async def test_low_stock_is_strictly_below_threshold(store):
    for name, quantity in [("Onion", 0), ("Tomato", 23), ("Rice", 67), ("Potato", 150)]:
        await add_product(store, name, quantity)

    stats = await DashboardAggregator(store).stats()

    assert stats.low_stock_threshold == 100
    assert stats.total_products == 4
    assert stats.low_stock_items == 3


async def test_threshold_setting_is_used(store):
    await add_product(store, "Potato", 150)
    await add_product(store, "Rice", 100)
    await store.set_setting("low_stock_threshold", "101")
    await store.commit()

    stats = await DashboardAggregator(store).stats()

    assert stats.low_stock_threshold == 101
    assert stats.low_stock_items == 1


async def test_revenue_counts_only_confirmed_orders(store):
    await add_order(store, 150, payment_status="Confirmed")
    await add_order(store, 80.5, payment_status="Confirmed")
    await add_order(store, 45, payment_status="Pending")
    await add_order(store, 300, payment_status="Failed")

    stats = await DashboardAggregator(store).stats()

    assert stats.total_revenue == 230.5
    assert stats.pending_orders == 1


async def test_empty_store(store):
    stats = await DashboardAggregator(store).stats()

    assert stats.total_products == 0
    assert stats.pending_orders == 0
    assert stats.low_stock_items == 0
    assert stats.total_revenue == 0


def test_unparseable_threshold_falls_back_to_default():
    assert parse_threshold(None) == 100
    assert parse_threshold("lots") == 100
    assert parse_threshold("-5") == 100
    assert parse_threshold(" 40 ") == 40
