"""Runtime bus package providing a lightweight in-process dispatcher."""

from .bus import RuntimeBus
from . import topics
from .messages import MessageEnvelope

__all__ = ["RuntimeBus", "MessageEnvelope", "topics"]
