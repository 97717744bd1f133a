# devgad/services/order_service.py
# Checkout, order listings, status transitions and the admin message thread

import logging
import re
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from devgad.core.config import settings
from devgad.core.errors import NotFoundError, ValidationFailure
from devgad.crud import order as crud_order
from devgad.db.events import ChangeFeed, Unsubscribe, change_feed
from devgad.db.session import SessionLocal
from devgad.models.order import Order, OrderStatus, SenderType
from devgad.schemas.order import CheckoutForm, OrderOut
from devgad.services.cart_service import Cart
from devgad.services.identity import AuthUser

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"[6-9]\d{9}")


def is_valid_phone(phone: str) -> bool:
    return PHONE_PATTERN.fullmatch(phone or "") is not None


def is_local_pincode(pincode: str) -> bool:
    return (pincode or "").startswith(settings.DELIVERY_PINCODE_PREFIX)


def validate_checkout(form: CheckoutForm, cart: Cart, user: Optional[AuthUser]) -> None:
    """Raises ValidationFailure; runs before anything is written."""
    if not all(value.strip() for value in (form.name, form.phone, form.address, form.pincode)):
        raise ValidationFailure("Please fill all required fields")
    if cart.is_empty():
        raise ValidationFailure("Your cart is empty", field="cart")
    if not is_local_pincode(form.pincode):
        raise ValidationFailure(
            "Sorry, we only deliver in Mumbai. Please enter a valid Mumbai pincode.", field="pincode"
        )
    if not is_valid_phone(form.phone):
        raise ValidationFailure("Enter a valid phone number", field="phone")
    if user is None:
        raise ValidationFailure("Please log in to place an order.", field="user")


def place_order(db: Session, cart: Cart, form: CheckoutForm, user: Optional[AuthUser]) -> Order:
    validate_checkout(form, cart, user)

    customer = {
        "name": form.name,
        "email": user.email,
        "phone": form.phone,
        "address": form.address,
        "pincode": form.pincode,
        "notes": form.notes,
    }
    items = [line.to_dict() for line in cart.items]
    try:
        order = crud_order.create_order(db, user.uid, customer, items, cart.total_price)
    except Exception as e:
        db.rollback()
        logger.error(f"Placing order for {user.uid} failed: {e}")
        raise

    cart.clear()
    logger.info(f"Order {order.id} placed by {user.uid}: {len(items)} lines, total {order.total_price}")
    return order


def list_user_orders(db: Session, user_id: str) -> List[Order]:
    return crud_order.get_orders_by_user(db, user_id)


def list_recent_orders(db: Session, limit: Optional[int] = None) -> List[Order]:
    return crud_order.get_recent_orders(db, limit or settings.ADMIN_ORDER_WINDOW)


def partition_orders(orders) -> Dict[str, list]:
    buckets = {status.value: [] for status in OrderStatus}
    for order in orders:
        status = order.status.value if isinstance(order.status, OrderStatus) else str(order.status)
        buckets.setdefault(status, []).append(order)
    return buckets


def set_order_status(db: Session, order_id: str, status: OrderStatus) -> Order:
    """
    Overwrites the status, terminal or not. A confirmed order can still be
    rejected and vice versa; the overwrite is only logged.
    """
    order = crud_order.get_order(db, order_id)
    if order is None:
        raise NotFoundError("Order")
    if order.status is not OrderStatus.pending and order.status is not status:
        logger.warning(f"Order {order_id} moved from terminal status {order.status.value} to {status.value}")
    order = crud_order.update_order_status(db, order_id, status)
    logger.info(f"Order {order_id} is now {status.value}")
    return order


def confirm_order(db: Session, order_id: str) -> Order:
    return set_order_status(db, order_id, OrderStatus.confirmed)


def reject_order(db: Session, order_id: str) -> Order:
    return set_order_status(db, order_id, OrderStatus.rejected)


def append_message(db: Session, order_id: str, text: str, sender: SenderType = SenderType.admin) -> Order:
    body = (text or "").strip()
    if not body:
        raise ValidationFailure("Please enter a message", field="message")
    order = crud_order.get_order(db, order_id)
    if order is None:
        raise NotFoundError("Order")

    # Whole-list read-modify-write; concurrent senders race and the last write wins
    messages = list(order.messages or [])
    messages.append({
        "timestamp": datetime.utcnow().isoformat(),
        "sender_type": sender.value,
        "message": body,
    })
    order = crud_order.replace_messages(db, order, messages)
    logger.info(f"{sender.value} message added to order {order_id}")
    return order


class OrderFeed:
    """Live order listings re-delivered after every committed order write."""

    def __init__(self, feed: ChangeFeed = change_feed, session_factory=SessionLocal):
        self._feed = feed
        self._session_factory = session_factory

    def watch_user_orders(self, user_id: str, callback: Callable[[List[OrderOut]], None],
                          on_error: Optional[Callable[[Exception], None]] = None) -> Unsubscribe:
        def load():
            with self._session_factory() as db:
                return [OrderOut.model_validate(order) for order in list_user_orders(db, user_id)]

        return self._feed.subscribe("orders", load, callback, on_error)

    def watch_admin_orders(self, callback: Callable[[Dict[str, List[OrderOut]]], None],
                           on_error: Optional[Callable[[Exception], None]] = None,
                           limit: Optional[int] = None) -> Unsubscribe:
        def load():
            with self._session_factory() as db:
                orders = [OrderOut.model_validate(order) for order in list_recent_orders(db, limit)]
                return partition_orders(orders)

        return self._feed.subscribe("orders", load, callback, on_error)


order_feed = OrderFeed()
