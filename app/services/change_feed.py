from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from app.core.config import settings

ChangePayload = dict[str, str]

REPORTS = 'reports'
USER_ROLES = 'user_roles'
ENTITIES = frozenset({REPORTS, USER_ROLES})


@dataclass(eq=False)
class Subscription:
    entity: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue[ChangePayload]
    dropped: int = 0
    closed: bool = field(default=False)

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangePayload]:
        """Next event, or None when nothing arrived within ``timeout`` seconds."""
        if timeout is None:
            return await self.queue.get()
        try:
            return await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None


class ChangeFeed:
    """Best-effort publish/subscribe channel keyed by entity type.

    Delivery is at most once: a subscriber whose queue is full, or whose loop
    has gone away, misses the event and is expected to refetch.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, set[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, entity: str) -> Subscription:
        if entity not in ENTITIES:
            raise KeyError(entity)
        subscription = Subscription(
            entity=entity,
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self._queue_size),
        )
        with self._lock:
            self._subscribers.setdefault(entity, set()).add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.closed = True
        with self._lock:
            subscribers = self._subscribers.get(subscription.entity)
            if subscribers is not None:
                subscribers.discard(subscription)

    def subscriber_count(self, entity: str) -> int:
        with self._lock:
            return len(self._subscribers.get(entity, ()))

    def publish(self, entity: str, event: str, record_id: str) -> int:
        """Fan an event out to current subscribers. Safe to call from any thread."""
        payload: ChangePayload = {'entity': entity, 'event': event, 'id': record_id}
        with self._lock:
            subscribers = list(self._subscribers.get(entity, ()))
        scheduled = 0
        for subscription in subscribers:
            try:
                subscription.loop.call_soon_threadsafe(_offer, subscription, payload)
            except RuntimeError:
                logger.debug('change_feed.loop_closed', entity=entity)
                self.unsubscribe(subscription)
                continue
            scheduled += 1
        return scheduled


def _offer(subscription: Subscription, payload: ChangePayload) -> None:
    if subscription.closed:
        return
    try:
        subscription.queue.put_nowait(payload)
    except asyncio.QueueFull:
        subscription.dropped += 1
        logger.warning('change_feed.dropped', entity=subscription.entity, dropped=subscription.dropped)


change_feed = ChangeFeed(queue_size=settings.CHANGE_FEED_QUEUE_SIZE)
