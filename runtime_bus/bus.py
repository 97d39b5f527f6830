from __future__ import annotations

import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .messages import MessageEnvelope

logger = logging.getLogger(__name__)

Handler = Callable[[MessageEnvelope], None]


def _iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class _Subscription:
    topic: str
    handler: Handler
    source: Optional[str]

    def wants(self, envelope: MessageEnvelope) -> bool:
        return self.source is None or self.source == envelope.source


class RuntimeBus:
    """In-process pub/sub channel between viewer components.

    Delivery is synchronous on the publishing thread, in subscription order.
    A subscription may name a ``source`` and then only sees envelopes from
    that publisher, which is how several viewers share one bus. A failing
    handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscriptions: Dict[str, _Subscription] = {}
        self._by_topic: Dict[str, List[str]] = {}
        self._seq = itertools.count(1)
        self._published = 0

    def subscribe(self, topic: str, handler: Handler, *, source: Optional[str] = None) -> str:
        sub_id = uuid.uuid4().hex
        with self._lock:
            self._subscriptions[sub_id] = _Subscription(topic, handler, source)
            self._by_topic.setdefault(topic, []).append(sub_id)
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        with self._lock:
            subscription = self._subscriptions.pop(sub_id, None)
            if subscription is None:
                return
            ids = self._by_topic.get(subscription.topic, [])
            if sub_id in ids:
                ids.remove(sub_id)
            if not ids:
                self._by_topic.pop(subscription.topic, None)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._by_topic.get(topic, ()))

    @property
    def published_count(self) -> int:
        return self._published

    def publish(self, topic: str, payload: Optional[Dict[str, Any]], source: str) -> MessageEnvelope:
        with self._lock:
            envelope = MessageEnvelope(
                seq=next(self._seq),
                topic=topic,
                source=source,
                timestamp=_iso_timestamp(),
                payload=dict(payload) if isinstance(payload, dict) else {},
            )
            self._published += 1
            targets = [self._subscriptions[sid] for sid in self._by_topic.get(topic, ()) if sid in self._subscriptions]
        for subscription in targets:
            if not subscription.wants(envelope):
                continue
            try:
                subscription.handler(envelope)
            except Exception as exc:
                logger.error("runtime_bus handler error topic=%s source=%s: %s", topic, source, exc, exc_info=True)
        return envelope
