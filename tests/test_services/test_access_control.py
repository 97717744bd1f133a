from devgad.services.access_control import (
    Denial,
    GuardOutcome,
    GuardPolicy,
    RouteGuard,
    evaluate,
    http_status_for,
)
from devgad.services.identity import AuthUser, IdentityPhase, IdentitySnapshot

USER = AuthUser("u1", "asha@devgadhapus.in", True)


def snapshot(**overrides):
    values = dict(
        user=USER,
        loading=False,
        is_admin=False,
        is_suspended=False,
        is_email_verified=True,
        phase=IdentityPhase.authenticated,
    )
    values.update(overrides)
    return IdentitySnapshot(**values)


def test_loading_waits():
    decision = evaluate(GuardPolicy.authenticated, snapshot(loading=True, is_suspended=True), "/checkout")
    assert decision.outcome is GuardOutcome.wait
    assert http_status_for(decision) == 503


def test_suspended_goes_home_before_anything_else():
    decision = evaluate(GuardPolicy.authenticated, snapshot(user=None, is_suspended=True), "/orders")
    assert (decision.outcome, decision.redirect_to, decision.denial) == (GuardOutcome.redirect, "/", Denial.suspended)
    assert http_status_for(decision) == 403


def test_anonymous_is_sent_to_sign_in_with_requested_path():
    decision = evaluate(GuardPolicy.authenticated, snapshot(user=None, is_email_verified=False), "/checkout")
    assert decision.redirect_to == "/auth"
    assert decision.from_path == "/checkout"
    assert http_status_for(decision) == 401


def test_unverified_is_sent_to_verification():
    auth = evaluate(GuardPolicy.authenticated, snapshot(is_email_verified=False), "/orders")
    admin = evaluate(GuardPolicy.admin, snapshot(is_email_verified=False, is_admin=True), "/admin")
    assert (auth.redirect_to, auth.from_path) == ("/verify-email", "/orders")
    assert (admin.redirect_to, admin.from_path) == ("/verify-email", None)


def test_admin_policy_rejects_non_admin():
    assert evaluate(GuardPolicy.authenticated, snapshot(), "/admin").allowed
    decision = evaluate(GuardPolicy.admin, snapshot(), "/admin")
    assert (decision.redirect_to, decision.denial) == ("/", Denial.not_admin)
    assert evaluate(GuardPolicy.admin, snapshot(is_admin=True), "/admin").allowed


def test_notification_fires_once_per_denial():
    guard = RouteGuard(GuardPolicy.admin)
    first = guard.check(snapshot(), "/admin")
    again = guard.check(snapshot(), "/admin")
    assert first.notification == "Admin access only"
    assert again.notification is None
    assert again.outcome is GuardOutcome.redirect

    suspended = guard.check(snapshot(is_suspended=True), "/admin")
    assert suspended.notification == "Your account has been suspended."


def test_render_and_wait_never_notify():
    guard = RouteGuard(GuardPolicy.authenticated)
    assert guard.check(snapshot(loading=True), "/orders").notification is None
    assert guard.check(snapshot(), "/orders").notification is None


def test_signed_out_visitor_notifications_per_policy():
    anonymous = snapshot(user=None, is_email_verified=False)
    auth = RouteGuard(GuardPolicy.authenticated).check(anonymous, "/orders")
    admin = RouteGuard(GuardPolicy.admin).check(anonymous, "/admin")
    assert auth.notification == "Please log in to continue"
    assert (admin.redirect_to, admin.from_path, admin.notification) == ("/auth", "/admin", None)
    assert http_status_for(admin) == 401
