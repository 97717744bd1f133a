# devgad/services/access_control.py
# Route guards: authenticated-only and admin-only policies over the identity snapshot

import enum
from dataclasses import dataclass
from typing import Optional, Set

from devgad.services.identity import IdentitySnapshot

HOME = "/"
CART = "/cart"
CHECKOUT = "/checkout"
ORDERS = "/orders"
ADMIN = "/admin"
SIGN_IN = "/auth"
VERIFY_EMAIL = "/verify-email"


class GuardPolicy(str, enum.Enum):
    authenticated = "authenticated"
    admin = "admin"


class GuardOutcome(str, enum.Enum):
    wait = "wait"
    redirect = "redirect"
    render = "render"


class Denial(str, enum.Enum):
    no_user = "no_user"
    suspended = "suspended"
    unverified = "unverified"
    not_admin = "not_admin"


NOTIFICATIONS = {
    GuardPolicy.authenticated: {
        Denial.no_user: "Please log in to continue",
        Denial.suspended: "Your account has been suspended. Contact support.",
        Denial.unverified: "Please verify your email to continue.",
    },
    GuardPolicy.admin: {
        Denial.suspended: "Your account has been suspended.",
        Denial.unverified: "Please verify your email first.",
        Denial.not_admin: "Admin access only",
    },
}


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    redirect_to: Optional[str] = None
    from_path: Optional[str] = None
    denial: Optional[Denial] = None
    notification: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.render


def evaluate(policy: GuardPolicy, snapshot: IdentitySnapshot, path: str) -> GuardDecision:
    """Pure policy check; notifications are attached by RouteGuard."""
    if snapshot.loading:
        return GuardDecision(GuardOutcome.wait)
    if snapshot.is_suspended:
        return GuardDecision(GuardOutcome.redirect, HOME, denial=Denial.suspended)
    if snapshot.user is None:
        return GuardDecision(GuardOutcome.redirect, SIGN_IN, from_path=path, denial=Denial.no_user)
    if not snapshot.is_email_verified:
        from_path = path if policy is GuardPolicy.authenticated else None
        return GuardDecision(GuardOutcome.redirect, VERIFY_EMAIL, from_path=from_path, denial=Denial.unverified)
    if policy is GuardPolicy.admin and not snapshot.is_admin:
        return GuardDecision(GuardOutcome.redirect, HOME, denial=Denial.not_admin)
    return GuardDecision(GuardOutcome.render)


class RouteGuard:
    """
    Stateful guard for one protected view; each denial notifies once per guard.
    The admin policy has no notification for a signed-out visitor.
    """

    def __init__(self, policy: GuardPolicy):
        self.policy = policy
        self._notified: Set[Denial] = set()

    def check(self, snapshot: IdentitySnapshot, path: str) -> GuardDecision:
        decision = evaluate(self.policy, snapshot, path)
        if decision.denial is None or decision.denial in self._notified:
            return decision
        self._notified.add(decision.denial)
        return GuardDecision(
            decision.outcome,
            decision.redirect_to,
            decision.from_path,
            decision.denial,
            NOTIFICATIONS[self.policy].get(decision.denial),
        )


def http_status_for(decision: GuardDecision) -> int:
    if decision.outcome is GuardOutcome.wait:
        return 503
    if decision.redirect_to == SIGN_IN:
        return 401
    return 403
