"""Order change feed.

Every committed insert or update of an order row is announced as an
``OrderChanged`` event.  Subscribers register an insert handler and an
update handler and get back a token; ``unsubscribe(token)`` stops delivery
and may be called any number of times.

Delivery guarantees
-------------------
* Events for one row are delivered in commit order (they are published from
  ``transaction.on_commit`` callbacks, which run in commit order).
* Delivery is at-least-once.  Handlers must be idempotent; the console's
  watchers re-fetch and re-aggregate instead of patching local state.
* With ``ORDER_FEED_REDIS_URL`` set, events travel through a Redis pub/sub
  channel so every worker process sees them.  Losing the Redis connection
  is a degraded state, never an error: it is logged, the listener
  reconnects with capped exponential backoff, and publishing falls back to
  in-process delivery meanwhile.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Optional
from uuid import UUID

import redis
import structlog
from django.db import close_old_connections
from redis.exceptions import RedisError

from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus

logger = structlog.get_logger(__name__)


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class OrderChanged(DomainEvent):
    """Raised after an order row is inserted or updated."""

    kind: ChangeKind = ChangeKind.UPDATE
    values: Dict[str, Any] = field(default_factory=dict)


ChangeHandler = Callable[[OrderChanged], None]


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


def normalize_for_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: normalize_for_json(val) for key, val in value.items()}
    return value


def encode_event(event: OrderChanged) -> str:
    return json.dumps(
        {
            **event.envelope(),
            "kind": event.kind.value,
            "values": normalize_for_json(event.values),
        }
    )


def decode_event(raw: Any) -> OrderChanged:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    data = json.loads(raw)
    return OrderChanged(
        aggregate_id=UUID(data["aggregate_id"]),
        event_id=UUID(data["event_id"]),
        occurred_on=datetime.fromisoformat(data["occurred_on"]),
        kind=ChangeKind(data["kind"]),
        values=data.get("values") or {},
    )


# ---------------------------------------------------------------------------
# In-process feed
# ---------------------------------------------------------------------------


class ChangeFeed:
    """Fan-out of order change events to subscribed handlers."""

    def __init__(self, bus: Optional[InMemoryEventBus] = None) -> None:
        self._bus = bus or InMemoryEventBus()
        self._relay: Optional[RedisFeedRelay] = None

    def subscribe(
        self,
        on_insert: Optional[ChangeHandler] = None,
        on_update: Optional[ChangeHandler] = None,
    ) -> UUID:
        def dispatch(event: OrderChanged) -> None:
            handler = on_insert if event.kind == ChangeKind.INSERT else on_update
            if handler is not None:
                handler(event)

        token = self._bus.subscribe(OrderChanged, dispatch)
        logger.info("order_feed.subscribed", token=str(token))
        return token

    def unsubscribe(self, token: UUID) -> None:
        if self._bus.unsubscribe(token):
            logger.info("order_feed.unsubscribed", token=str(token))

    def publish(self, event: OrderChanged) -> None:
        """Announce *event* to every subscriber, across processes when relayed."""
        relay = self._relay
        if relay is not None:
            try:
                relay.send(event)
                return
            except RedisError as exc:
                logger.warning(
                    "order_feed.relay_publish_failed",
                    order_id=str(event.aggregate_id),
                    error=str(exc),
                )
        self.deliver(event)

    def deliver(self, event: OrderChanged) -> None:
        """Hand *event* to local subscribers only."""
        logger.debug(
            "order_feed.delivering",
            order_id=str(event.aggregate_id),
            kind=event.kind.value,
        )
        self._bus.publish(event)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def attach_relay(self, relay: RedisFeedRelay) -> None:
        self._relay = relay

    def detach_relay(self) -> Optional[RedisFeedRelay]:
        relay, self._relay = self._relay, None
        return relay

    def health(self) -> Dict[str, Any]:
        relay = self._relay
        subscribers = self._bus.subscriber_count(OrderChanged)
        if relay is None:
            return {"status": "up", "transport": "memory", "subscribers": subscribers}
        return {
            "status": "up" if relay.connected else "degraded",
            "transport": "redis",
            "subscribers": subscribers,
        }


# ---------------------------------------------------------------------------
# Redis relay
# ---------------------------------------------------------------------------


class RedisFeedRelay:
    """Carries feed events between processes over a Redis pub/sub channel.

    ``send`` publishes to the channel; a listener thread (``start``)
    re-delivers every received event to the local feed.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        client: Any,
        channel: str,
        initial_backoff: float = 0.5,
        max_backoff: float = 30.0,
    ) -> None:
        self._feed = feed
        self._client = client
        self._channel = channel
        self._initial_backoff = initial_backoff
        self._max_backoff = max_backoff
        self._stopped = threading.Event()
        self._connected = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_url(
        cls,
        feed: ChangeFeed,
        url: str,
        channel: str,
        max_backoff: float = 30.0,
        timeout: float = 5.0,
    ) -> RedisFeedRelay:
        client = redis.Redis.from_url(
            url,
            socket_connect_timeout=timeout,
            health_check_interval=30,
        )
        return cls(feed, client, channel, max_backoff=max_backoff)

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def send(self, event: OrderChanged) -> None:
        self._client.publish(self._channel, encode_event(event))

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self.run, name="order-feed-relay", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def run(self) -> None:
        """Listen until ``stop`` is called, reconnecting after failures."""
        delay = self._initial_backoff
        while not self._stopped.is_set():
            pubsub = None
            try:
                pubsub = self._client.pubsub(ignore_subscribe_messages=True)
                pubsub.subscribe(self._channel)
                self._connected.set()
                logger.info("order_feed.relay_connected", channel=self._channel)
                delay = self._initial_backoff
                for message in pubsub.listen():
                    if self._stopped.is_set():
                        break
                    self._handle_message(message)
            except RedisError as exc:
                logger.warning(
                    "order_feed.relay_disconnected",
                    channel=self._channel,
                    error=str(exc),
                    retry_in=delay,
                )
            finally:
                self._connected.clear()
                if pubsub is not None:
                    try:
                        pubsub.close()
                    except RedisError:
                        logger.debug("order_feed.relay_close_failed")
            if self._stopped.wait(delay):
                break
            delay = min(delay * 2, self._max_backoff)
        logger.info("order_feed.relay_stopped", channel=self._channel)

    def _handle_message(self, message: Dict[str, Any]) -> None:
        if message.get("type") != "message":
            return
        try:
            event = decode_event(message["data"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("order_feed.relay_bad_message", error=str(exc))
            return
        # Handlers query the order store from this thread, outside any request.
        close_old_connections()
        try:
            self._feed.deliver(event)
        finally:
            close_old_connections()


change_feed = ChangeFeed()


def configure_relay(feed: ChangeFeed = change_feed) -> Optional[RedisFeedRelay]:
    """Attach and start a Redis relay when ``ORDER_FEED_REDIS_URL`` is set."""
    from django.conf import settings

    url = getattr(settings, "ORDER_FEED_REDIS_URL", "")
    if not url:
        return None
    relay = RedisFeedRelay.from_url(
        feed,
        url,
        settings.ORDER_FEED_CHANNEL,
        max_backoff=settings.ORDER_FEED_MAX_BACKOFF_SECONDS,
        timeout=settings.ORDER_STORE_TIMEOUT_SECONDS,
    )
    feed.attach_relay(relay)
    relay.start()
    logger.info("order_feed.relay_configured", channel=settings.ORDER_FEED_CHANNEL)
    return relay
