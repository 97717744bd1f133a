# devgad/core/config.py - Storefront settings

from pydantic_settings import BaseSettings
from typing import FrozenSet, List, Optional

class Settings(BaseSettings):
    SECRET_KEY: str
    DATABASE_URL: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    ALGORITHM: str = "HS256"
    ENVIRONMENT: str = "development"

    # Comma-separated emails that are always treated as admin
    ADMIN_EMAILS: str = ""

    # Business rules
    DELIVERY_PINCODE_PREFIX: str = "400"  # Mumbai delivery only
    ADMIN_ORDER_WINDOW: int = 50
    CART_IDLE_MINUTES: int = 60 * 24
    PASSWORD_MIN_LENGTH: int = 6

    # Email verification / passwordless sign-in
    PUBLIC_BASE_URL: str = "http://localhost:5173"
    MAIL_FROM: str = "orders@devgadhapus.in"
    EMAIL_LINK_EXPIRE_MINUTES: int = 60
    VERIFY_EMAIL_EXPIRE_HOURS: int = 24

    # Federated (Google) sign-in; disabled when no key is configured
    FEDERATED_AUTH_SECRET: Optional[str] = None
    FEDERATED_AUTH_AUDIENCE: Optional[str] = None
    FEDERATED_AUTH_ALGORITHM: str = "HS256"

    # Login throttling (Redis); disabled when REDIS_URL is unset
    REDIS_URL: Optional[str] = None
    MAX_LOGIN_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    CORS_ORIGINS: str = "*"

    @property
    def admin_email_allowlist(self) -> FrozenSet[str]:
        return frozenset(
            email.strip().lower() for email in self.ADMIN_EMAILS.split(",") if email.strip()
        )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

settings = Settings()
