from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from datetime import datetime
from devgad.db.session import Base
import secrets


def generate_uid() -> str:
    return secrets.token_urlsafe(21)[:28]


class AuthAccount(Base):
    """Credentials and session state owned by the auth provider."""

    __tablename__ = "auth_accounts"

    uid = Column(String(28), primary_key=True, default=generate_uid)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)  # None for link / federated accounts
    provider = Column(String, nullable=False, default="password")
    email_verified = Column(Boolean, nullable=False, default=False)
    session_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def document_path(self) -> str:
        return f"accounts/{self.uid}"


class UserProfile(Base):
    """Contact and delivery details captured at registration."""

    __tablename__ = "users"

    id = Column(String(28), primary_key=True, default=generate_uid)
    uid = Column(String(28), index=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    address = Column(String, nullable=False)
    pincode = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def document_path(self) -> str:
        return f"users/{self.id}"


class UserRole(Base):
    __tablename__ = "user_roles"

    uid = Column(String(28), primary_key=True)
    admin = Column(Boolean, nullable=True)
    suspended = Column(Boolean, nullable=True)

    @property
    def document_path(self) -> str:
        return f"userRoles/{self.uid}"

    def to_record(self) -> dict:
        record = {}
        if self.admin is not None:
            record["admin"] = self.admin
        if self.suspended is not None:
            record["suspended"] = self.suspended
        return record
