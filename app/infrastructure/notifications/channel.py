"""In-process broadcast channel feeding realtime notification subscribers."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from typing import Any, AsyncIterator, DefaultDict, Set

from app.domain.exceptions import ChannelError

logger = logging.getLogger(__name__)

_CLOSED = object()


class BroadcastSubscription:
    """Queue of payloads published to a single address.

    The subscription belongs to the event loop it was created on; publishers
    on other threads hand payloads over with ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        channel: "BroadcastChannel",
        address: str,
        loop: asyncio.AbstractEventLoop,
        queue_size: int,
    ) -> None:
        self.address = address
        self._channel = channel
        self._loop = loop
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size + 1)
        self._queue_size = queue_size
        self._closed = False
        self._end_queued = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop receiving payloads and end any pending iteration."""

        if self._closed:
            return
        self._closed = True
        self._channel._unsubscribe(self)
        try:
            self._loop.call_soon_threadsafe(self._put, _CLOSED)
        except RuntimeError:
            logger.debug("Event loop for %s already closed", self.address)

    async def get(self) -> dict[str, Any]:
        """Wait for the next payload; raise ``StopAsyncIteration`` once closed."""

        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self

    async def __anext__(self) -> dict[str, Any]:
        return await self.get()

    def __enter__(self) -> "BroadcastSubscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _deliver(self, payload: dict[str, Any]) -> None:
        self._loop.call_soon_threadsafe(self._put, payload)

    def _put(self, item: Any) -> None:
        # Nothing may follow the end marker; a late publish would strand the reader.
        if self._end_queued:
            return
        if item is _CLOSED:
            self._end_queued = True
        elif self._queue.qsize() >= self._queue_size:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            else:
                logger.warning(
                    "Subscriber on %s is falling behind; dropped the oldest payload",
                    self.address,
                )
        self._queue.put_nowait(item)


class BroadcastChannel:
    """Deliver every published payload to all subscribers of an address."""

    def __init__(self, *, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscriptions: DefaultDict[str, Set[BroadcastSubscription]] = defaultdict(set)
        self._lock = threading.Lock()
        self._closed = False

    def subscribe(self, address: str) -> BroadcastSubscription:
        """Register a new subscription for ``address`` on the running loop."""

        loop = asyncio.get_running_loop()
        subscription = BroadcastSubscription(self, address, loop, self._queue_size)
        with self._lock:
            if self._closed:
                raise ChannelError("El canal de notificaciones está cerrado")
            self._subscriptions[address].add(subscription)
        logger.debug("Subscribed to %s", address)
        return subscription

    def publish(self, address: str, payload: dict[str, Any]) -> None:
        """Hand ``payload`` to every current subscriber of ``address``.

        Never waits for subscribers; publishing to an address nobody listens
        to is silently ignored.
        """

        with self._lock:
            if self._closed:
                raise ChannelError("El canal de notificaciones está cerrado")
            subscribers = list(self._subscriptions.get(address, ()))

        for subscription in subscribers:
            try:
                subscription._deliver(dict(payload))
            except RuntimeError:
                logger.debug("Dropping subscription on %s with a closed loop", address)
                self._unsubscribe(subscription)

    def subscriber_count(self, address: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(address, ()))

    def close(self) -> None:
        """End every subscription and refuse further publishes."""

        with self._lock:
            self._closed = True
            subscriptions = [
                subscription
                for group in self._subscriptions.values()
                for subscription in group
            ]
        for subscription in subscriptions:
            subscription.close()

    def _unsubscribe(self, subscription: BroadcastSubscription) -> None:
        with self._lock:
            group = self._subscriptions.get(subscription.address)
            if group is None:
                return
            group.discard(subscription)
            if not group:
                self._subscriptions.pop(subscription.address, None)


__all__ = ["BroadcastChannel", "BroadcastSubscription"]
