from devgad.crud import order as crud_order
from devgad.crud import user as crud_user
from devgad.db.events import ChangeFeed, change_feed, path_matches


def test_path_matching():
    assert path_matches("orders", "orders/abc")
    assert path_matches("orders/abc", "orders/abc")
    assert not path_matches("orders/abc", "orders/abcd")
    assert not path_matches("orders", "ordersX/1")


def test_subscribe_delivers_current_value_then_updates():
    feed = ChangeFeed()
    state = {"value": 1}
    seen = []
    unsubscribe = feed.subscribe("userRoles/u1", lambda: state["value"], seen.append)
    state["value"] = 2
    feed.publish(["userRoles/u1", "orders/x"])
    feed.publish(["userRoles/u2"])
    unsubscribe()
    feed.publish(["userRoles/u1"])
    assert seen == [1, 2]


def test_loader_errors_go_to_error_callback():
    feed = ChangeFeed()
    errors = []

    def broken():
        raise RuntimeError("offline")

    feed.subscribe("orders", broken, lambda value: None, errors.append)
    assert [str(e) for e in errors] == ["offline"]


def test_commits_publish_document_paths(db):
    seen = []
    change_feed.subscribe("orders", lambda: len(seen), seen.append)
    order = crud_order.create_order(db, "u1", {"name": "Asha"}, [], 0)
    crud_order.update_order_status(db, order.id, order.status)
    assert len(seen) >= 2

    roles_seen = []
    change_feed.subscribe("userRoles/u1", lambda: crud_user.load_role_record("u1"), roles_seen.append)
    crud_user.update_role(db, "u1", {"admin": True})
    db.commit()
    assert roles_seen == [None, {"admin": True}]


def test_rollback_publishes_nothing(db):
    seen = []
    change_feed.subscribe("userRoles", lambda: "tick", seen.append)
    crud_user.update_role(db, "u9", {"suspended": True})
    db.flush()
    db.rollback()
    assert seen == ["tick"]
