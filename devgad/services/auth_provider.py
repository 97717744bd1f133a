# devgad/services/auth_provider.py
# Accounts, sign-in flows, session tokens and email verification

import logging
from datetime import timedelta
from typing import Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from devgad.core.config import settings
from devgad.core.errors import ProviderError, ValidationFailure
from devgad.core.rate_limiter import LoginRateLimiter, rate_limiter
from devgad.core.security import (
    create_access_token,
    create_action_token,
    decode_federated_token,
    decode_token,
    hash_password,
    verify_password,
)
from devgad.crud import user as crud_user
from devgad.models.user import AuthAccount
from devgad.schemas.user import RegisterRequest
from devgad.services.identity import AuthUser
from devgad.services.mailer import Mailer, mailer
from devgad.services.order_service import is_local_pincode, is_valid_phone

logger = logging.getLogger(__name__)

DEFAULT_ROLE = {"admin": False, "suspended": False}


def normalize_email(email: str) -> str:
    try:
        return validate_email(email or "", check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise ProviderError("auth/invalid-email")


def validate_registration(data: RegisterRequest) -> None:
    required = (data.name, data.email, data.phone, data.address, data.pincode, data.password)
    if not all(value.strip() for value in required):
        raise ValidationFailure("Please fill all fields")
    if data.password != data.confirm_password:
        raise ValidationFailure("Passwords do not match", field="confirm_password")
    if len(data.password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationFailure(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters", field="password"
        )
    if not is_local_pincode(data.pincode):
        raise ValidationFailure("Only Mumbai pincodes accepted (400XXX)", field="pincode")
    if not is_valid_phone(data.phone):
        raise ValidationFailure("Enter a valid phone number", field="phone")


def to_auth_user(account: AuthAccount) -> AuthUser:
    return AuthUser(uid=account.uid, email=account.email, email_verified=bool(account.email_verified))


class AuthProvider:
    def __init__(self, mail: Mailer = mailer, limiter: LoginRateLimiter = rate_limiter):
        self.mailer = mail
        self.limiter = limiter

    # Sessions

    def issue_token(self, account: AuthAccount) -> str:
        return create_access_token({"sub": account.uid, "ver": account.session_version})

    def current_user(self, db: Session, token: Optional[str]) -> Optional[AuthUser]:
        """Resolve a bearer token; None for anonymous, invalid or logged-out tokens."""
        if not token:
            return None
        payload = decode_token(token)
        if payload is None:
            return None
        account = crud_user.get_account(db, payload.get("sub") or "")
        if account is None or payload.get("ver") != account.session_version:
            return None
        return to_auth_user(account)

    def logout(self, db: Session, uid: str) -> None:
        account = crud_user.get_account(db, uid)
        if account is None:
            return
        account.session_version += 1
        db.commit()
        logger.info(f"User {uid} signed out")

    # Password accounts

    def register(self, db: Session, data: RegisterRequest) -> Tuple[AuthAccount, str]:
        validate_registration(data)
        email = normalize_email(data.email)
        if crud_user.get_account_by_email(db, email) is not None:
            raise ProviderError("auth/email-already-in-use")

        try:
            account = crud_user.create_account(db, email, hash_password(data.password), "password")
            crud_user.create_profile(db, account.uid, data.model_copy(update={"email": email}))
            crud_user.update_role(db, account.uid, DEFAULT_ROLE)
            db.commit()
            db.refresh(account)
        except IntegrityError:
            db.rollback()
            raise ProviderError("auth/email-already-in-use")
        except Exception as e:
            db.rollback()
            logger.error(f"Registration failed for {email}: {e}")
            raise

        logger.info(f"Registered user {account.uid}")
        self.send_verification_email(account)
        return account, self.issue_token(account)

    def login(self, db: Session, email: str, password: str) -> Tuple[AuthAccount, str]:
        self._throttle(email)
        account = crud_user.get_account_by_email(db, email or "")
        if account is None or not account.password_hash or not verify_password(password, account.password_hash):
            raise ProviderError("auth/invalid-credential")
        logger.info(f"User {account.uid} signed in with password")
        return account, self.issue_token(account)

    # Passwordless email link

    def send_sign_in_link(self, email: str) -> None:
        email = normalize_email(email)
        self._throttle(email)
        code = create_action_token(
            "email_link", email, timedelta(minutes=settings.EMAIL_LINK_EXPIRE_MINUTES)
        )
        self.mailer.send_sign_in_link(email, f"{settings.PUBLIC_BASE_URL}/auth?mode=signIn&oobCode={code}")

    def sign_in_with_email_link(self, db: Session, email: str, code: str) -> Tuple[AuthAccount, str]:
        email = normalize_email(email)
        payload = decode_token(code, purpose="email_link")
        if payload is None or payload.get("sub") != email:
            raise ProviderError("auth/invalid-action-code")

        # Following the link proves control of the inbox
        account = self._get_or_create(db, email, provider="email_link", email_verified=True)
        if not account.email_verified:
            account.email_verified = True
            db.commit()
        logger.info(f"User {account.uid} signed in with email link")
        return account, self.issue_token(account)

    # Federated (Google)

    def sign_in_with_federated(self, db: Session, id_token: Optional[str]) -> Tuple[AuthAccount, str]:
        if not settings.FEDERATED_AUTH_SECRET:
            raise ProviderError("auth/operation-not-allowed")
        if not id_token:
            raise ProviderError("auth/popup-closed-by-user")
        claims = decode_federated_token(id_token)
        if claims is None or not claims.get("email"):
            raise ProviderError("auth/invalid-credential")

        email = normalize_email(claims["email"])
        account = self._get_or_create(
            db, email, provider="google", email_verified=claims.get("email_verified") is True
        )
        if not account.email_verified:
            self.send_verification_email(account)
        logger.info(f"User {account.uid} signed in with Google")
        return account, self.issue_token(account)

    # Email verification

    def send_verification_email(self, account: AuthAccount) -> None:
        code = create_action_token(
            "verify_email", account.uid, timedelta(hours=settings.VERIFY_EMAIL_EXPIRE_HOURS)
        )
        self.mailer.send_verification(account.email, f"{settings.PUBLIC_BASE_URL}/verify-email?oobCode={code}")

    def apply_email_verification(self, db: Session, code: str) -> AuthAccount:
        payload = decode_token(code, purpose="verify_email")
        account = crud_user.get_account(db, payload.get("sub") or "") if payload else None
        if account is None:
            raise ProviderError("auth/invalid-action-code")
        if not account.email_verified:
            account.email_verified = True
            db.commit()
            db.refresh(account)
            logger.info(f"Email verified for {account.uid}")
        return account

    def _get_or_create(self, db: Session, email: str, provider: str, email_verified: bool) -> AuthAccount:
        account = crud_user.get_account_by_email(db, email)
        if account is not None:
            return account
        try:
            account = crud_user.create_account(db, email, None, provider, email_verified=email_verified)
            crud_user.update_role(db, account.uid, DEFAULT_ROLE)
            db.commit()
            db.refresh(account)
        except Exception as e:
            db.rollback()
            logger.error(f"Creating {provider} account for {email} failed: {e}")
            raise
        return account

    def _throttle(self, email: str) -> None:
        if not self.limiter.is_allowed(email or ""):
            raise ProviderError("auth/too-many-requests")


auth_provider = AuthProvider()
