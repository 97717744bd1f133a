from datetime import datetime, timedelta

import pytest

from devgad.core.errors import NotFoundError, ValidationFailure
from devgad.crud import order as crud_order
from devgad.data.catalog import get_product
from devgad.models.order import Order, OrderStatus, SenderType
from devgad.schemas.order import CheckoutForm
from devgad.services import order_service
from devgad.services.cart_service import Cart
from devgad.services.identity import AuthUser

USER = AuthUser("uidAsha", "asha@devgadhapus.in", True)


def form(**overrides):
    values = dict(name="Asha Patil", phone="9876543210", address="12 Hill Road", pincode="400001", notes="")
    values.update(overrides)
    return CheckoutForm(**values)


def filled_cart():
    cart = Cart()
    cart.add(get_product("royal-hapus"))
    cart.add(get_product("royal-hapus"))
    cart.add(get_product("aam-ras-special"))
    return cart


def test_checkout_outside_delivery_area_writes_nothing(db):
    cart = filled_cart()
    with pytest.raises(ValidationFailure) as excinfo:
        order_service.place_order(db, cart, form(pincode="110001"), USER)
    assert excinfo.value.field == "pincode"
    assert db.query(Order).count() == 0
    assert cart.total_items == 3


@pytest.mark.parametrize("phone", ["5876543210", "987654321", "98765432100", "98765x3210", ""])
def test_checkout_rejects_bad_phone(db, phone):
    with pytest.raises(ValidationFailure):
        order_service.place_order(db, filled_cart(), form(phone=phone), USER)
    assert db.query(Order).count() == 0


def test_checkout_requires_items_and_user(db):
    with pytest.raises(ValidationFailure) as excinfo:
        order_service.place_order(db, Cart(), form(), USER)
    assert excinfo.value.field == "cart"

    with pytest.raises(ValidationFailure) as excinfo:
        order_service.place_order(db, filled_cart(), form(), None)
    assert excinfo.value.field == "user"

    with pytest.raises(ValidationFailure):
        order_service.place_order(db, filled_cart(), form(address="  "), USER)
    assert db.query(Order).count() == 0


def test_checkout_creates_one_pending_order_and_clears_cart(db):
    cart = filled_cart()
    order = order_service.place_order(db, cart, form(notes="Ring twice"), USER)

    assert db.query(Order).count() == 1
    assert order.status is OrderStatus.pending
    assert order.messages == []
    assert order.user_id == "uidAsha"
    assert order.total_price == 2 * 1800 + 1100
    assert [(item["id"], item["quantity"]) for item in order.items] == [("royal-hapus", 2), ("aam-ras-special", 1)]
    assert order.customer["email"] == "asha@devgadhapus.in"
    assert order.customer["notes"] == "Ring twice"
    assert order.short_code == "#" + order.id[-6:].upper()
    assert cart.is_empty()


def test_terminal_status_is_overwritten(db):
    order = order_service.place_order(db, filled_cart(), form(), USER)
    order_service.reject_order(db, order.id)
    confirmed = order_service.confirm_order(db, order.id)
    assert confirmed.status is OrderStatus.confirmed


def test_transition_unknown_order(db):
    with pytest.raises(NotFoundError):
        order_service.confirm_order(db, "missing")


def test_messages_append_in_order(db):
    order = order_service.place_order(db, filled_cart(), form(), USER)
    order_service.append_message(db, order.id, "  Delivery on Saturday  ")
    order = order_service.append_message(db, order.id, "Driver: 98200 00000")

    assert [m["message"] for m in order.messages] == ["Delivery on Saturday", "Driver: 98200 00000"]
    assert {m["sender_type"] for m in order.messages} == {SenderType.admin.value}
    assert order.status is OrderStatus.pending


def test_empty_message_is_rejected(db):
    order = order_service.place_order(db, filled_cart(), form(), USER)
    with pytest.raises(ValidationFailure):
        order_service.append_message(db, order.id, "   ")
    db.refresh(order)
    assert order.messages == []


def test_user_listing_is_exact_owner_match(db):
    for owner in ("uidAsha", "uidasha", "uidAsha2", "uidAsha"):
        crud_order.create_order(db, owner, {"name": owner}, [], 100)

    mine = order_service.list_user_orders(db, "uidAsha")
    assert len(mine) == 2
    assert {order.user_id for order in mine} == {"uidAsha"}


def test_admin_window_is_most_recent_fifty(db):
    start = datetime(2026, 4, 1, 9, 0, 0)
    for i in range(55):
        order = Order(
            id=f"order{i:03d}",
            user_id="uidAsha",
            customer={"name": "Asha"},
            items=[],
            total_price=100,
            status=OrderStatus.confirmed if i % 3 == 0 else OrderStatus.pending,
            messages=[],
            created_at=start + timedelta(minutes=i),
        )
        db.add(order)
    db.commit()

    recent = order_service.list_recent_orders(db)
    assert len(recent) == 50
    assert recent[0].id == "order054"
    assert recent[-1].id == "order005"

    buckets = order_service.partition_orders(recent)
    assert set(buckets) == {"pending", "confirmed", "rejected"}
    assert len(buckets["pending"]) + len(buckets["confirmed"]) == 50
    assert buckets["rejected"] == []


def test_user_feed_redelivers_after_status_change(db):
    order = order_service.place_order(db, filled_cart(), form(), USER)
    deliveries = []
    unsubscribe = order_service.order_feed.watch_user_orders("uidAsha", deliveries.append)

    order_service.confirm_order(db, order.id)
    unsubscribe()

    assert [o.status for o in deliveries[0]] == [OrderStatus.pending]
    assert [o.status for o in deliveries[-1]] == [OrderStatus.confirmed]


def test_admin_feed_partitions(db):
    order = order_service.place_order(db, filled_cart(), form(), USER)
    deliveries = []
    unsubscribe = order_service.order_feed.watch_admin_orders(deliveries.append)
    order_service.reject_order(db, order.id)
    unsubscribe()

    assert [o.id for o in deliveries[0]["pending"]] == [order.id]
    assert [o.id for o in deliveries[-1]["rejected"]] == [order.id]
