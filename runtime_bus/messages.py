from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class MessageEnvelope:
    """One delivery on the runtime bus.

    ``seq`` increases with every publish on a bus, so a subscriber that sees
    two view updates can tell which one is newer.
    """

    seq: int
    topic: str
    source: str
    timestamp: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "topic": self.topic,
            "source": self.source,
            "timestamp": self.timestamp,
            "payload": dict(self.payload),
        }
