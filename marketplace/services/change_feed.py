"""Change feed: the publish/subscribe contract behind live UI updates.

A client renders query results, then waits for a ChangeEvent naming a
table it cares about and re-runs the query.  Two ways to wait:

  GET /v1/changes/version  poll; re-query when the number moves
  GET /v1/changes/stream   Server-Sent Events, one event per change

The version is a single feed-wide counter.  It only says "something in
this table changed", never what; clients always re-read from the API,
so a dropped or coalesced event costs one extra query, never a stale
screen that stays stale.

Backends follow the same conditional singleton as the repos:
InMemoryChangeFeed inside one process, RedisChangeFeed (PUBLISH + INCR)
when REDIS_URL is set so every API instance sees every change.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from dataclasses import asdict, dataclass
from typing import Protocol, runtime_checkable

from marketplace.core.metrics import CHANGE_FEED_SUBSCRIBERS
from marketplace.db.redis import redis_pool

logger = logging.getLogger(__name__)

# Per-subscriber buffer.  A client this far behind is dropped events and
# will catch up through the version number on its next read.
_SUBSCRIBER_BUFFER = 100


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    table: str  # courses|lessons|purchases|progress
    action: str  # insert|update|delete
    version: int

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def from_json(raw: str) -> ChangeEvent:
        data = json.loads(raw)
        return ChangeEvent(
            table=data["table"], action=data["action"], version=int(data["version"])
        )


class Subscription(Protocol):
    def __aiter__(self) -> AsyncIterator[ChangeEvent]: ...

    async def __anext__(self) -> ChangeEvent: ...

    async def aclose(self) -> None: ...


@runtime_checkable
class ChangeFeed(Protocol):
    async def publish(self, table: str, action: str) -> ChangeEvent:
        """Bump the version and notify every subscriber."""
        ...

    async def current_version(self) -> int: ...

    async def subscribe(self) -> Subscription:
        """Register a subscriber; it receives every event published after
        this call returns.  The caller must aclose() it."""
        ...


class InMemoryChangeFeed:
    def __init__(self) -> None:
        self._version = 0
        self._subscribers: set[asyncio.Queue[ChangeEvent]] = set()

    async def publish(self, table: str, action: str) -> ChangeEvent:
        self._version += 1
        event = ChangeEvent(table=table, action=action, version=self._version)
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Change feed subscriber lagging; dropped v=%d", event.version
                )
        return event

    async def current_version(self) -> int:
        return self._version

    async def subscribe(self) -> _QueueSubscription:
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=_SUBSCRIBER_BUFFER)
        self._subscribers.add(queue)
        CHANGE_FEED_SUBSCRIBERS.inc()
        return _QueueSubscription(self._subscribers, queue)


class _QueueSubscription:
    def __init__(
        self,
        subscribers: set[asyncio.Queue[ChangeEvent]],
        queue: asyncio.Queue[ChangeEvent],
    ) -> None:
        self._subscribers = subscribers
        self._queue = queue
        self._closed = False

    def __aiter__(self) -> _QueueSubscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        return await self._queue.get()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._subscribers.discard(self._queue)
        CHANGE_FEED_SUBSCRIBERS.dec()


class RedisChangeFeed:
    """Redis-backed feed shared by every API instance."""

    _CHANNEL = "changes:events"
    _VERSION_KEY = "changes:version"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def publish(self, table: str, action: str) -> ChangeEvent:
        version = await self._redis.incr(self._VERSION_KEY)
        event = ChangeEvent(table=table, action=action, version=int(version))
        await self._redis.publish(self._CHANNEL, event.to_json())
        return event

    async def current_version(self) -> int:
        raw = await self._redis.get(self._VERSION_KEY)
        return int(raw) if raw is not None else 0

    async def subscribe(self) -> _PubSubSubscription:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._CHANNEL)
        # The SUBSCRIBE is live once the server acknowledges it.
        await pubsub.get_message(timeout=1.0)
        CHANGE_FEED_SUBSCRIBERS.inc()
        return _PubSubSubscription(pubsub, self._CHANNEL)


class _PubSubSubscription:
    def __init__(self, pubsub, channel: str) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._messages = pubsub.listen()
        self._closed = False

    def __aiter__(self) -> _PubSubSubscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        while True:
            message = await anext(self._messages)
            if message.get("type") != "message":
                continue
            try:
                return ChangeEvent.from_json(message["data"])
            except (ValueError, KeyError):
                logger.warning("Discarding malformed change event: %r", message)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        CHANGE_FEED_SUBSCRIBERS.dec()
        await self._pubsub.unsubscribe(self._channel)
        await self._pubsub.aclose()


def format_sse(event: ChangeEvent) -> str:
    """Render one event in text/event-stream framing."""
    return f"id: {event.version}\nevent: change\ndata: {event.to_json()}\n\n"


async def publish_all(feed: ChangeFeed, changes: list[tuple[str, str]]) -> None:
    for table, action in changes:
        event = await feed.publish(table, action)
        logger.debug(
            "Change published table=%s action=%s v=%d",
            table,
            action,
            event.version,
        )


if redis_pool is not None:
    change_feed: ChangeFeed = RedisChangeFeed(redis_pool)
else:
    change_feed = InMemoryChangeFeed()
