# devgad/services/identity.py
# Session/identity context: auth session + live role record -> admin / suspended / verified flags

import enum
import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Tuple

from devgad.db.events import ChangeFeed, Unsubscribe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """The auth provider's session object. Referenced, never mutated."""

    uid: str
    email: Optional[str]
    email_verified: bool = False


class IdentityPhase(str, enum.Enum):
    unauthenticated = "unauthenticated"
    authenticating_role = "authenticating_role"
    authenticated = "authenticated"


@dataclass(frozen=True)
class IdentitySnapshot:
    user: Optional[AuthUser] = None
    loading: bool = True
    is_admin: bool = False
    is_suspended: bool = False
    is_email_verified: bool = False
    phase: IdentityPhase = IdentityPhase.unauthenticated

    def to_dict(self) -> dict:
        return {
            "user": None if self.user is None else {
                "uid": self.user.uid,
                "email": self.user.email,
                "email_verified": self.user.email_verified,
            },
            "loading": self.loading,
            "is_admin": self.is_admin,
            "is_suspended": self.is_suspended,
            "is_email_verified": self.is_email_verified,
            "phase": self.phase.value,
        }


def normalize_allowlist(emails: Iterable[str]) -> frozenset:
    return frozenset(email.strip().lower() for email in emails if email and email.strip())


def is_admin_email(email: Optional[str], allowlist: Iterable[str]) -> bool:
    if not email:
        return False
    return email.strip().lower() in allowlist


def derive_role(record: Optional[dict], email: Optional[str], allowlist: Iterable[str]) -> Tuple[bool, bool]:
    """Return (is_admin, is_suspended). Suspension always wins over the admin flag and the allow-list."""
    record = record or {}
    suspended = record.get("suspended") is True
    admin = (record.get("admin") is True or is_admin_email(email, allowlist)) and not suspended
    return admin, suspended


RoleLoader = Callable[[str], Optional[dict]]
SnapshotListener = Callable[[IdentitySnapshot], None]


class SessionContext:
    """
    Owns exactly one role subscription for the current auth session.

    Every auth change bumps a generation counter and tears down the previous
    subscription before opening the next one; role callbacks carrying an older
    generation are ignored, so a quick logout/login never applies the previous
    identity's role. Use as a context manager or call ``close()``.
    """

    def __init__(self, feed: ChangeFeed, load_role: RoleLoader, admin_emails: Iterable[str] = ()):
        self._feed = feed
        self._load_role = load_role
        self._allowlist = normalize_allowlist(admin_emails)
        self._lock = threading.RLock()
        self._generation = 0
        self._role_unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[SnapshotListener] = []
        self._snapshot = IdentitySnapshot()
        self._closed = False

    @property
    def snapshot(self) -> IdentitySnapshot:
        return self._snapshot

    @property
    def has_role_subscription(self) -> bool:
        return self._role_unsubscribe is not None

    def subscribe(self, listener: SnapshotListener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)
            listener(self._snapshot)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def on_auth_state_changed(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("SessionContext is closed")
            self._teardown_role()
            self._generation += 1
            generation = self._generation
            verified = bool(user is not None and user.email_verified)

            if user is None:
                self._publish(IdentitySnapshot(user=None, loading=False, phase=IdentityPhase.unauthenticated))
                return

            self._publish(IdentitySnapshot(
                user=user,
                loading=True,
                is_email_verified=verified,
                phase=IdentityPhase.authenticating_role,
            ))
            self._role_unsubscribe = self._feed.subscribe(
                f"userRoles/{user.uid}",
                lambda: self._load_role(user.uid),
                lambda record: self._apply_role(generation, record),
                lambda error: self._apply_role_error(generation, error),
            )

    def close(self) -> None:
        with self._lock:
            self._teardown_role()
            self._generation += 1
            self._listeners.clear()
            self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _apply_role(self, generation: int, record: Optional[dict]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            user = self._snapshot.user
            admin, suspended = derive_role(record, user.email if user else None, self._allowlist)
            self._publish(replace(
                self._snapshot,
                loading=False,
                is_admin=admin,
                is_suspended=suspended,
                phase=IdentityPhase.authenticated,
            ))

    def _apply_role_error(self, generation: int, error: Exception) -> None:
        with self._lock:
            if generation != self._generation:
                return
            user = self._snapshot.user
            logger.warning(f"Role subscription failed for {user.uid if user else None}, using allow-list: {error}")
            self._publish(replace(
                self._snapshot,
                loading=False,
                is_admin=is_admin_email(user.email if user else None, self._allowlist),
                is_suspended=False,
                phase=IdentityPhase.authenticated,
            ))

    def _teardown_role(self) -> None:
        if self._role_unsubscribe is not None:
            self._role_unsubscribe()
            self._role_unsubscribe = None

    def _publish(self, snapshot: IdentitySnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
