# devgad/api/routes_admin.py
# Admin console: order fulfillment and user role management

from fastapi import APIRouter, Depends, WebSocket
from sqlalchemy.orm import Session
from typing import List, Optional
from devgad.api.live import stream_feed
from devgad.db.deps import get_db, require_admin
from devgad.schemas.order import AdminOrdersOut, MessageCreate, OrderOut
from devgad.schemas.user import RoleRecordOut, UserWithRoleOut
from devgad.services import order_service, role_service
from devgad.services.access_control import GuardPolicy
from devgad.services.identity import SessionContext
from devgad.services.order_service import order_feed
from devgad.services.role_service import RoleAction

router = APIRouter()

@router.get("/orders", response_model=AdminOrdersOut)
def list_orders(db: Session = Depends(get_db), admin: SessionContext = Depends(require_admin)):
    """Most recent orders, newest first, split by status."""
    return order_service.partition_orders(order_service.list_recent_orders(db))

@router.websocket("/orders/stream")
async def stream_orders(websocket: WebSocket, token: Optional[str] = None):
    def watch(context, callback, on_error):
        return order_feed.watch_admin_orders(callback, on_error)

    def render(buckets):
        return {
            status: [order.model_dump(mode="json") for order in orders]
            for status, orders in buckets.items()
        }

    await stream_feed(websocket, token, GuardPolicy.admin, watch, render)

@router.post("/orders/{order_id}/confirm", response_model=OrderOut)
def confirm_order(order_id: str, db: Session = Depends(get_db), admin: SessionContext = Depends(require_admin)):
    return order_service.confirm_order(db, order_id)

@router.post("/orders/{order_id}/reject", response_model=OrderOut)
def reject_order(order_id: str, db: Session = Depends(get_db), admin: SessionContext = Depends(require_admin)):
    return order_service.reject_order(db, order_id)

@router.post("/orders/{order_id}/messages", response_model=OrderOut)
def send_message(
    order_id: str,
    data: MessageCreate,
    db: Session = Depends(get_db),
    admin: SessionContext = Depends(require_admin),
):
    return order_service.append_message(db, order_id, data.message)

@router.get("/users", response_model=List[UserWithRoleOut])
def list_users(db: Session = Depends(get_db), admin: SessionContext = Depends(require_admin)):
    return role_service.list_users_with_roles(db)

@router.post("/users/{uid}/{action}", response_model=RoleRecordOut)
def update_user_role(
    uid: str,
    action: RoleAction,
    db: Session = Depends(get_db),
    admin: SessionContext = Depends(require_admin),
):
    record = role_service.apply_role_action(db, admin.snapshot.user.uid, uid, action)
    return RoleRecordOut(uid=uid, **record)
