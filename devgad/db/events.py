# devgad/db/events.py
# Change feed: re-fires path subscriptions after every committed write

import logging
import threading
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy import event

from devgad.db.session import SessionLocal

logger = logging.getLogger("database.feed")

Unsubscribe = Callable[[], None]


def path_matches(subscribed: str, changed: str) -> bool:
    """A subscription on ``orders`` sees ``orders/abc``; one on ``orders/abc`` sees only itself."""
    return changed == subscribed or changed.startswith(subscribed + "/")


class Subscription:
    def __init__(self, path: str, loader: Callable[[], Any], callback: Callable[[Any], None],
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.path = path.strip("/")
        self.loader = loader
        self.callback = callback
        self.on_error = on_error
        self.active = True


class ChangeFeed:
    """
    In-process pub/sub over document paths.

    ``subscribe`` delivers the current value right away and again after each
    commit that touches the subscribed path or anything below it. Every
    listener is re-fired, including the one whose request made the write.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, path: str, loader: Callable[[], Any], callback: Callable[[Any], None],
                  on_error: Optional[Callable[[Exception], None]] = None) -> Unsubscribe:
        subscription = Subscription(path, loader, callback, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        self._deliver(subscription)

        def unsubscribe():
            subscription.active = False
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return unsubscribe

    def publish(self, paths: Iterable[str]) -> None:
        changed = {path.strip("/") for path in paths}
        if not changed:
            return
        with self._lock:
            targets = [
                sub for sub in self._subscriptions
                if any(path_matches(sub.path, path) for path in changed)
            ]
        for subscription in targets:
            self._deliver(subscription)

    def _deliver(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        try:
            value = subscription.loader()
        except Exception as e:
            if subscription.on_error is not None:
                subscription.on_error(e)
            else:
                logger.warning(f"Subscription on {subscription.path} failed to load: {e}")
            return
        if not subscription.active:
            return
        try:
            subscription.callback(value)
        except Exception:
            logger.exception(f"Subscriber on {subscription.path} raised")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def clear(self) -> None:
        with self._lock:
            for subscription in self._subscriptions:
                subscription.active = False
            self._subscriptions.clear()


change_feed = ChangeFeed()


@event.listens_for(SessionLocal, "after_flush")
def collect_changed_paths(session, flush_context):
    changed = session.info.setdefault("changed_paths", set())
    for obj in list(session.new) + list(session.dirty) + list(session.deleted):
        path = getattr(obj, "document_path", None)
        if path:
            changed.add(path)


@event.listens_for(SessionLocal, "after_commit")
def publish_changed_paths(session):
    paths = session.info.pop("changed_paths", None)
    if paths:
        change_feed.publish(paths)


@event.listens_for(SessionLocal, "after_rollback")
def discard_changed_paths(session):
    session.info.pop("changed_paths", None)
