# devgad/api/routes_auth.py
# Sign-in, registration and email verification endpoints

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from devgad.db.deps import get_db, get_session_context
from devgad.schemas.user import (
    ActionCode,
    AuthResult,
    EmailLinkRequest,
    EmailLinkSignIn,
    FederatedSignIn,
    LoginRequest,
    RegisterRequest,
)
from devgad.services import access_control
from devgad.services.auth_provider import auth_provider
from devgad.services.identity import SessionContext
from devgad.core.errors import ProviderError
from devgad.crud import user as crud_user


router = APIRouter()

def auth_result(account, token: str, redirect_to: str) -> AuthResult:
    return AuthResult(
        access_token=token,
        uid=account.uid,
        email=account.email,
        email_verified=bool(account.email_verified),
        redirect_to=redirect_to,
    )

@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create the account, profile and role record, then send the verification mail."""
    account, token = auth_provider.register(db, data)
    return auth_result(account, token, access_control.VERIFY_EMAIL)

@router.post("/login", response_model=AuthResult)
def login(data: LoginRequest, from_path: str = Query(access_control.HOME, alias="from"), db: Session = Depends(get_db)):
    account, token = auth_provider.login(db, data.email, data.password)
    return auth_result(account, token, from_path)

@router.post("/logout")
def logout(context: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    user = context.snapshot.user
    if user is not None:
        auth_provider.logout(db, user.uid)
    return {"message": "Signed out", "redirect_to": access_control.HOME}

@router.post("/email-link", status_code=status.HTTP_202_ACCEPTED)
def send_email_link(data: EmailLinkRequest):
    auth_provider.send_sign_in_link(data.email)
    return {"message": "Sign in link sent! Check your email."}

@router.post("/email-link/verify", response_model=AuthResult)
def verify_email_link(data: EmailLinkSignIn, from_path: str = Query(access_control.HOME, alias="from"), db: Session = Depends(get_db)):
    account, token = auth_provider.sign_in_with_email_link(db, data.email, data.code)
    return auth_result(account, token, from_path)

@router.post("/google", response_model=AuthResult)
def google_sign_in(data: FederatedSignIn, from_path: str = Query(access_control.HOME, alias="from"), db: Session = Depends(get_db)):
    account, token = auth_provider.sign_in_with_federated(db, data.id_token)
    return auth_result(account, token, from_path)

@router.post("/verification-email", status_code=status.HTTP_202_ACCEPTED)
def resend_verification_email(context: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    user = context.snapshot.user
    account = crud_user.get_account(db, user.uid) if user else None
    if account is None:
        raise ProviderError("auth/user-not-found")
    auth_provider.send_verification_email(account)
    return {"message": "Verification email sent! Check your inbox."}

@router.post("/verify-email")
def apply_verification(data: ActionCode, db: Session = Depends(get_db)):
    account = auth_provider.apply_email_verification(db, data.code)
    return {"message": "Email verified successfully!", "uid": account.uid, "email_verified": True}

@router.get("/me")
def me(context: SessionContext = Depends(get_session_context)):
    return context.snapshot.to_dict()

