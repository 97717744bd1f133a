from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session
from typing import List, Optional
from devgad.api.live import stream_feed
from devgad.db.deps import get_cart, get_db, require_auth
from devgad.schemas.order import CheckoutForm, CheckoutResult, OrderOut
from devgad.services.access_control import GuardPolicy
from devgad.services.cart_service import Cart
from devgad.services.identity import SessionContext
from devgad.services import order_service
from devgad.services.order_service import order_feed

router = APIRouter()

@router.post("/checkout", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
def checkout(
    form: CheckoutForm,
    cart: Cart = Depends(get_cart),
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_auth),
):
    order = order_service.place_order(db, cart, form, context.snapshot.user)
    return CheckoutResult(order_id=order.id, short_code=order.short_code, status=order.status)

@router.get("/mine", response_model=List[OrderOut])
def list_my_orders(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_auth),
):
    return order_service.list_user_orders(db, context.snapshot.user.uid)

@router.websocket("/mine/stream")
async def stream_my_orders(websocket: WebSocket, token: Optional[str] = None):
    """Pushes the caller's order list now and after every committed order change."""
    def watch(context, callback, on_error):
        return order_feed.watch_user_orders(context.snapshot.user.uid, callback, on_error)

    def render(orders):
        return {"orders": [order.model_dump(mode="json") for order in orders]}

    await stream_feed(websocket, token, GuardPolicy.authenticated, watch, render)
