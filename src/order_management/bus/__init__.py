"""Topic-routed in-process message bus."""

from .message_bus import (
    HandlerFailure,
    InMemoryMessageBus,
    IntegrationMessage,
    MessageBus,
    MessageHandler,
)

__all__ = [
    "HandlerFailure",
    "InMemoryMessageBus",
    "IntegrationMessage",
    "MessageBus",
    "MessageHandler",
]
