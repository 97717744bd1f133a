from sqlalchemy.orm import Session
from typing import List, Optional
from devgad.models.order import Order, OrderStatus

def create_order(db: Session, user_id: str, customer: dict, items: List[dict], total_price: float) -> Order:
    order = Order(
        user_id=user_id,
        customer=customer,
        items=items,
        total_price=total_price,
        status=OrderStatus.pending,
        messages=[],
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order

def get_order(db: Session, order_id: str) -> Optional[Order]:
    return db.query(Order).filter(Order.id == order_id).first()

def get_recent_orders(db: Session, limit: int) -> List[Order]:
    return db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()

def get_orders_by_user(db: Session, user_id: str) -> List[Order]:
    return (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )

def update_order_status(db: Session, order_id: str, new_status: OrderStatus) -> Optional[Order]:
    order = get_order(db, order_id)
    if not order:
        return None
    order.status = new_status
    db.commit()
    db.refresh(order)
    return order

def replace_messages(db: Session, order: Order, messages: List[dict]) -> Order:
    order.messages = messages
    db.commit()
    db.refresh(order)
    return order
