import asyncio

from sqlalchemy import select

from conftest import ADMIN_ID, add_order
from models import RawTransaction
from services.payment_matcher import PaymentMatcher, PaymentNotification


async def test_prefix_tolerant_match_confirms_order(store):
    order = await add_order(store, 150, phone="+919876543210")

    result = await PaymentMatcher(store).process(
        PaymentNotification(amount=150, phone="9876543210", sms_text="Rs.150 Credited by 9876543210")
    )

    assert result.success is True
    assert result.order_id == order.id
    assert result.message == f"Payment confirmed for Order #{order.id}"
    assert (await store.get_order(order.id)).payment_status == "Confirmed"

    transactions = await store.list_transactions()
    assert len(transactions) == 1
    assert transactions[0].status == "Matched"
    assert transactions[0].order_id == order.id


async def test_stored_bare_phone_matches_prefixed_notification(store):
    order = await add_order(store, 99.5, phone="9876543210")

    result = await PaymentMatcher(store).process(PaymentNotification(amount=99.5, phone="+919876543210"))

    assert result.order_id == order.id


async def test_no_match_files_unmatched_transaction(store):
    order = await add_order(store, 150)

    result = await PaymentMatcher(store).process(PaymentNotification(amount=200, phone="9876543210"))

    assert result.success is False
    assert result.order_id is None
    assert result.message == "No matching order found for Rs.200 from 9876543210"
    assert (await store.get_order(order.id)).payment_status == "Pending"

    transactions = await store.list_transactions()
    assert len(transactions) == 1
    assert transactions[0].status == "Unmatched"
    assert transactions[0].order_id is None


async def test_wrong_phone_does_not_match(store):
    await add_order(store, 150, phone="+919876543210")

    result = await PaymentMatcher(store).process(PaymentNotification(amount=150, phone="9999999999"))
    assert result.success is False


async def test_already_confirmed_order_is_not_matched_again(store):
    order = await add_order(store, 150, payment_status="Confirmed")

    result = await PaymentMatcher(store).process(PaymentNotification(amount=150, phone="9876543210"))

    assert result.success is False
    assert (await store.get_order(order.id)).payment_status == "Confirmed"
    assert (await store.list_transactions("Unmatched"))[0].amount == 150


async def test_oldest_pending_order_is_matched_first(store):
    first = await add_order(store, 150)
    second = await add_order(store, 150)

    first_result = await PaymentMatcher(store).process(PaymentNotification(amount=150, phone="9876543210"))
    second_result = await PaymentMatcher(store).process(PaymentNotification(amount=150, phone="9876543210"))

    assert first_result.order_id == first.id
    assert second_result.order_id == second.id


async def test_raw_sms_is_kept_for_audit(store):
    await add_order(store, 150)

    await PaymentMatcher(store).process(
        PaymentNotification(amount=150, phone="9876543210", sms_text="Rs.150 Credited by 9876543210", sender_id=ADMIN_ID)
    )

    raws = (await store.db.execute(select(RawTransaction))).scalars().all()
    assert len(raws) == 1
    assert raws[0].sms_text == "Rs.150 Credited by 9876543210"
    assert raws[0].sender_id == ADMIN_ID
    assert raws[0].status == "Matched"


async def test_concurrent_notifications_confirm_once(store, make_store):
    order = await add_order(store, 150)

    results = await asyncio.gather(*(
        PaymentMatcher(make_store()).process(PaymentNotification(amount=150, phone="9876543210"))
        for _ in range(5)
    ))

    assert [result.order_id for result in results].count(order.id) == 1
    statuses = sorted(transaction.status for transaction in await store.list_transactions())
    assert statuses == ["Matched"] + ["Unmatched"] * 4
