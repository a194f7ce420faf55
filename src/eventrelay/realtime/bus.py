"""In-process fan-out bus — one publish, a copy for every subscriber.

Learn: Each subscriber gets its own bounded ring buffer (a deque with
maxlen). publish() appends to every ring without awaiting anything, so a
slow WebSocket client can never hold up the publisher or its neighbours.
When a ring is full the oldest undelivered message for THAT subscriber
falls off the front — drop-oldest, counted in Subscription.dropped.

Late subscribers only see messages published after subscribe(); there is
no history. The bus lives for the whole process and is closed once, on
shutdown.
"""

import asyncio
import itertools
from collections import deque
from typing import Optional

import structlog

from eventrelay.errors import BusClosedError

logger = structlog.get_logger()

DEFAULT_CAPACITY = 256

_handle_ids = itertools.count(1)


class Subscription:
    """A single subscriber's handle on the bus.

    receive() suspends until a message arrives and returns None once the
    handle has been closed. Iterating with `async for` stops at closure.
    """

    def __init__(self, bus: "FanoutBus", capacity: int, owner: Optional[str] = None):
        self.id = next(_handle_ids)
        self.owner = owner or f"subscription-{self.id}"
        self.dropped = 0
        self._bus = bus
        self._buffer: deque[str] = deque(maxlen=capacity)
        self._ready = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages buffered but not yet received."""
        return len(self._buffer)

    def _deliver(self, message: str) -> bool:
        if self._closed:
            return False
        if len(self._buffer) == self._buffer.maxlen:
            self.dropped += 1
            if self.dropped == 1:
                logger.warning(
                    "relay.subscriber_lagging",
                    client_id=self.owner,
                    dropped=self.dropped,
                    capacity=self._buffer.maxlen,
                )
        self._buffer.append(message)
        self._ready.set()
        return True

    def _mark_closed(self) -> None:
        self._closed = True
        self._buffer.clear()
        self._ready.set()  # wake a pending receive()

    async def receive(self) -> Optional[str]:
        """Next message in publish order, or None once closed."""
        while not self._closed:
            if self._buffer:
                return self._buffer.popleft()
            self._ready.clear()
            await self._ready.wait()
        return None

    async def close(self) -> None:
        """Leave the bus. Idempotent; other handles are unaffected."""
        await self._bus.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        message = await self.receive()
        if message is None:
            raise StopAsyncIteration
        return message


class FanoutBus:
    """Multi-producer, multi-consumer broadcast of serialized events."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._subscribers: set[Subscription] = set()
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def subscribe(self, owner: Optional[str] = None) -> Subscription:
        """Create a handle that receives every message published from now on.

        `owner` names the handle in log records (the connection id).
        """
        async with self._lock:
            if self._closed:
                raise BusClosedError("bus is closed")
            subscription = Subscription(self, self.capacity, owner)
            self._subscribers.add(subscription)
            return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        async with self._lock:
            self._subscribers.discard(subscription)
            subscription._mark_closed()

    async def publish(self, message: str) -> int:
        """Hand `message` to every live subscriber.

        Returns how many subscribers it was delivered to. Zero is a normal
        result, not an error. Never waits on subscriber consumption.
        """
        async with self._lock:
            if self._closed:
                raise BusClosedError("bus is closed")
            delivered = 0
            for subscription in self._subscribers:
                if subscription._deliver(message):
                    delivered += 1
            return delivered

    async def subscriber_count(self) -> int:
        async with self._lock:
            return len(self._subscribers)

    async def close(self) -> None:
        """Close every handle and refuse further publishes (shutdown)."""
        async with self._lock:
            self._closed = True
            for subscription in self._subscribers:
                subscription._mark_closed()
            self._subscribers.clear()
