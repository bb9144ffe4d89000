# warung/services/change_feed.py

import asyncio
import inspect
import logging
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, List, Optional
from uuid import uuid4

from supabase import AsyncClient, acreate_client

from domain.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subscription:
    id: str
    table: str


def _callback_ref(on_change: Callable[[], None]) -> Callable[[], Optional[Callable[[], None]]]:
    # bound methods are held weakly so a subscriber that disappears
    # (a closed Streamlit session) drops out without calling unsubscribe
    if inspect.ismethod(on_change):
        return weakref.WeakMethod(on_change)
    return lambda: on_change


class ChangeFeed:
    """
    Process-wide "table changed" signal.

    Callbacks get no payload; a notification only means "re-run your read".
    The underlying channel is opened for the first subscriber and closed
    again when the last one unsubscribes or is garbage collected.
    """

    def __init__(self, table: str):
        self.table = table
        self._subscribers: Dict[str, Callable[[], Optional[Callable[[], None]]]] = {}
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._live_callbacks())

    def _live_callbacks(self) -> List[Callable[[], None]]:
        with self._lock:
            live = []
            dead = []
            for sub_id, ref in self._subscribers.items():
                callback = ref()
                if callback is None:
                    dead.append(sub_id)
                else:
                    live.append(callback)
            for sub_id in dead:
                del self._subscribers[sub_id]
            emptied = bool(dead) and not self._subscribers

        if dead:
            logger.debug("Dropped %s collected subscriber(s) from %s", len(dead), self.table)
        if emptied:
            self._close()
        return live

    def subscribe(self, on_change: Callable[[], None]) -> Subscription:
        self._live_callbacks()
        subscription = Subscription(id=uuid4().hex, table=self.table)
        with self._lock:
            first = not self._subscribers
            self._subscribers[subscription.id] = _callback_ref(on_change)

        if first:
            try:
                self._open()
            except Exception:
                with self._lock:
                    self._subscribers.pop(subscription.id, None)
                raise

        logger.debug("Subscribed %s to %s changes", subscription.id, self.table)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscription.id, None)
            last = removed is not None and not self._subscribers

        if last:
            self._close()

    def notify(self) -> None:
        for callback in self._live_callbacks():
            try:
                callback()
            except Exception:
                logger.exception("Change callback for %s failed", self.table)

    def _open(self) -> None:
        """Start listening to the backing store. No-op for an in-process feed."""

    def _close(self) -> None:
        """Stop listening to the backing store."""


class SupabaseChangeFeed(ChangeFeed):
    """
    ChangeFeed driven by Supabase realtime `postgres_changes`.

    The realtime client is async-only, so it runs on its own event loop in a
    daemon thread; Streamlit script threads hand work to it and wait.
    """

    def __init__(
            self,
            url: str,
            key: str,
            *,
            schema: str = "public",
            table: str,
            timeout_seconds: float = 10,
    ):
        super().__init__(table)
        self._url = url
        self._key = key
        self._schema = schema
        self._timeout_seconds = timeout_seconds

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._client: Optional[AsyncClient] = None
        self._channel: Any = None

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self._loop.run_forever,
                name=f"realtime-{self.table}",
                daemon=True,
            )
            self._thread.start()
        return self._loop

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
        return future.result(timeout=self._timeout_seconds)

    async def _subscribe_channel(self) -> None:
        if self._client is None:
            self._client = await acreate_client(self._url, self._key)

        channel = self._client.channel(f"{self.table}-changes")
        channel.on_postgres_changes(
            "*",
            schema=self._schema,
            table=self.table,
            callback=self._on_postgres_change,
        )
        await channel.subscribe()
        self._channel = channel

    def _on_postgres_change(self, payload: Any) -> None:
        logger.debug("Realtime change on %s", self.table)
        self.notify()

    def _open(self) -> None:
        try:
            self._run(self._subscribe_channel())
        except Exception as e:
            logger.error("Realtime subscribe to %s failed: %s", self.table, e)
            raise PersistenceError("Realtime subscribe failed", str(e)) from e
        logger.info("Realtime channel for %s opened", self.table)

    def _close(self) -> None:
        channel, self._channel = self._channel, None
        if channel is None or self._client is None:
            return
        if threading.current_thread() is self._thread:
            # reached from a realtime callback; waiting here would block the loop
            self._loop.create_task(self._client.remove_channel(channel))
            logger.info("Realtime channel for %s closing", self.table)
            return
        try:
            self._run(self._client.remove_channel(channel))
        except Exception as e:
            # the channel dies with the socket anyway; nothing to hand back to the caller
            logger.warning("Realtime unsubscribe from %s failed: %s", self.table, e)
            return
        logger.info("Realtime channel for %s closed", self.table)
