# devgad/api/live.py
# Bridges change feed subscriptions onto a WebSocket

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from fastapi import WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from devgad.db.deps import open_session_context
from devgad.db.events import Unsubscribe, change_feed
from devgad.db.session import SessionLocal
from devgad.services.access_control import GuardOutcome, GuardPolicy, RouteGuard, http_status_for
from devgad.services.auth_provider import auth_provider
from devgad.services.identity import IdentitySnapshot, SessionContext

logger = logging.getLogger(__name__)

# (context, callback, on_error) -> unsubscribe
Watch = Callable[[SessionContext, Callable[[Any], None], Callable[[Exception], None]], Unsubscribe]


@dataclass(frozen=True)
class StreamClosed:
    code: int
    reason: str


def _open_context(token: Optional[str]) -> SessionContext:
    with SessionLocal() as db:
        return open_session_context(db, token)


async def stream_feed(
    websocket: WebSocket,
    token: Optional[str],
    policy: GuardPolicy,
    watch: Watch,
    render: Callable[[Any], dict],
):
    """
    Guards the socket with the same rules as the HTTP routes, then sends
    ``render(value)`` for the initial value and every later delivery.

    The guard is re-run on every identity change while the socket is open.
    The token is re-resolved whenever the account changes, so a logout
    elsewhere ends the stream. A denial closes the socket with
    4000 + the HTTP status the route would answer.
    """
    context = await run_in_threadpool(_open_context, token)
    guard = RouteGuard(policy)
    path = websocket.url.path
    unsubscribers: List[Unsubscribe] = []
    try:
        decision = guard.check(context.snapshot, path)
        if not decision.allowed:
            await websocket.close(code=4000 + http_status_for(decision), reason=decision.notification or "")
            return

        await websocket.accept()
        loop = asyncio.get_running_loop()
        updates: asyncio.Queue = asyncio.Queue()
        closed = threading.Event()
        uid = context.snapshot.user.uid

        # Feed callbacks run on whichever thread committed the write
        def enqueue(item):
            loop.call_soon_threadsafe(updates.put_nowait, item)

        def push(value):
            if not closed.is_set():
                enqueue(render(value))

        def on_error(error):
            logger.warning(f"Stream {path} for {uid} failed to load: {error}")

        def on_identity(snapshot: IdentitySnapshot):
            decision = guard.check(snapshot, path)
            # a role reload passes through "wait"; only a redirect ends the stream
            if decision.outcome is not GuardOutcome.redirect or closed.is_set():
                return
            closed.set()
            logger.info(f"Closing stream {path} for {uid}: {decision.denial.value}")
            enqueue(StreamClosed(4000 + http_status_for(decision), decision.notification or ""))

        def load_account():
            with SessionLocal() as db:
                return auth_provider.current_user(db, token)

        def on_account(user):
            if not closed.is_set() and user != context.snapshot.user:
                context.on_auth_state_changed(user)

        def subscribe():
            unsubscribers.append(context.subscribe(on_identity))
            unsubscribers.append(change_feed.subscribe(f"accounts/{uid}", load_account, on_account))
            unsubscribers.append(watch(context, push, on_error))

        await run_in_threadpool(subscribe)

        async def pump():
            while True:
                item = await updates.get()
                if isinstance(item, StreamClosed):
                    await websocket.close(code=item.code, reason=item.reason)
                    return
                await websocket.send_json(item)

        async def drain():
            try:
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                pass

        tasks = [asyncio.create_task(pump()), asyncio.create_task(drain())]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            for result in await asyncio.gather(*tasks, return_exceptions=True):
                if isinstance(result, Exception):
                    logger.warning(f"Stream {path} for {uid} ended with error: {result}")
    finally:
        for unsubscribe in reversed(unsubscribers):
            unsubscribe()
        context.close()
