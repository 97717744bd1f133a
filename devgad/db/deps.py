from fastapi import Depends, HTTPException, Request, Response
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional
from devgad.core.config import settings
from devgad.crud.user import load_role_record
from devgad.db.events import change_feed
from devgad.db.session import SessionLocal
from devgad.services.access_control import GuardDecision, GuardOutcome, GuardPolicy, RouteGuard, http_status_for
from devgad.services.auth_provider import auth_provider
from devgad.services.cart_service import Cart, cart_registry
from devgad.services.identity import SessionContext

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

CART_COOKIE = "cart_id"
CART_HEADER = "X-Cart-Id"

# Dependency to get DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def open_session_context(db: Session, token: Optional[str]) -> SessionContext:
    context = SessionContext(change_feed, load_role_record, settings.admin_email_allowlist)
    context.on_auth_state_changed(auth_provider.current_user(db, token))
    return context

# Request-scoped identity; the role subscription is torn down when the request ends
def get_session_context(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    context = open_session_context(db, token)
    try:
        yield context
    finally:
        context.close()

def guard_exception(decision: GuardDecision) -> HTTPException:
    detail = {
        "message": "Please wait" if decision.outcome is GuardOutcome.wait else decision.notification,
        "redirect_to": decision.redirect_to,
        "from": decision.from_path,
    }
    headers = {"Retry-After": "1"} if http_status_for(decision) == 503 else None
    return HTTPException(status_code=http_status_for(decision), detail=detail, headers=headers)

def require_auth(request: Request, context: SessionContext = Depends(get_session_context)) -> SessionContext:
    decision = RouteGuard(GuardPolicy.authenticated).check(context.snapshot, request.url.path)
    if not decision.allowed:
        raise guard_exception(decision)
    return context

def require_admin(request: Request, context: SessionContext = Depends(get_session_context)) -> SessionContext:
    decision = RouteGuard(GuardPolicy.admin).check(context.snapshot, request.url.path)
    if not decision.allowed:
        raise guard_exception(decision)
    return context

def _requested_cart_id(request: Request) -> Optional[str]:
    return request.headers.get(CART_HEADER) or request.cookies.get(CART_COOKIE)

# Read-only cart: a client without a live cart gets an unregistered empty one
def get_cart(request: Request) -> Cart:
    cart = cart_registry.get(_requested_cart_id(request))
    return cart if cart is not None else Cart()

# Registers a cart on first use and hands its id back to the client
def get_or_create_cart(request: Request, response: Response) -> Cart:
    cart_id, cart = cart_registry.get_or_create(_requested_cart_id(request))
    if cart_id != request.cookies.get(CART_COOKIE):
        response.set_cookie(CART_COOKIE, cart_id, httponly=True, samesite="lax")
    response.headers[CART_HEADER] = cart_id
    return cart
