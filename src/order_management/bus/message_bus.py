"""In-process, topic-keyed publish/subscribe message bus.

Delivery contract
-----------------
*   **Fire-and-forget**: ``publish()`` wraps the payload in an
    :class:`IntegrationMessage`, schedules every subscribed handler as its
    own ``asyncio`` task and returns without awaiting any of them.
*   **At-most-once, best-effort**: nothing is buffered or
    retried.  A topic with no subscribers drops the message (logged at
    DEBUG, not an error).
*   **Isolated handlers**: a failing handler is logged, counted and
    recorded as a :class:`HandlerFailure`; sibling handlers and the
    publisher are unaffected.
*   **No ordering** beyond "all handlers of one ``publish`` see that
    call's envelope".

Concurrency discipline
----------------------
The bus is an explicitly owned instance, never a module global.  The
topic → handlers registry is guarded by a ``threading.Lock``; ``publish``
snapshots the handler list under the lock, so registration racing with
publication sees either the old or the new set, never a torn one.
Registration is still expected to happen once at startup.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from order_management.core.ids import new_id, utc_now

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 1000
DEFAULT_FAILURE_LIMIT = 1000


@dataclass(frozen=True)
class IntegrationMessage:
    """Envelope handed to every subscriber of a topic."""

    topic: str
    payload: Any
    message_id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utc_now)


# Type alias for async message handlers.
MessageHandler = Callable[[IntegrationMessage], Awaitable[None]]


@dataclass(frozen=True)
class HandlerFailure:
    """Record of a handler that raised while processing a message."""

    topic: str
    message_id: str
    handler: str
    error: str
    timestamp: datetime = field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class MessageBus(Protocol):
    """Publish/subscribe bus keyed by topic string."""

    async def publish(self, topic: str, payload: Any) -> IntegrationMessage | None:
        """Hand *payload* to every handler subscribed to *topic*.

        Never raises because of a handler.  Returns the envelope, or
        ``None`` when the message was dropped for lack of subscribers.
        """
        ...

    def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Register *handler* for *topic*."""
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

def _handler_name(handler: MessageHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class InMemoryMessageBus:
    """Asynchronous in-process broker.

    Parameters
    ----------
    on_handler_error
        Optional callback ``(topic, message_id, exc)`` invoked when a
        handler raises.  Useful for external metrics/alerting.
    history_limit
        Most recent published envelopes kept for :meth:`get_history`.
        Older ones are discarded.  ``0`` disables history.
    failure_limit
        Most recent :class:`HandlerFailure` records kept.  Error counts
        are never trimmed.
    """

    def __init__(
        self,
        on_handler_error: Callable[[str, str, BaseException], None] | None = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        failure_limit: int = DEFAULT_FAILURE_LIMIT,
    ) -> None:
        # topic -> handlers (dict keys keep insertion order and dedupe)
        self._subscribers: dict[str, dict[MessageHandler, None]] = defaultdict(dict)
        self._lock = threading.Lock()
        self._on_handler_error = on_handler_error

        self._pending: set[asyncio.Task[None]] = set()
        self._history: deque[IntegrationMessage] = deque(maxlen=history_limit)

        # Observability
        self._error_counts: dict[str, int] = defaultdict(int)
        self._failures: deque[HandlerFailure] = deque(maxlen=failure_limit)
        self._messages_delivered: int = 0

    # -- Subscription ------------------------------------------------------

    def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Register *handler* for *topic*.  Re-registering is a no-op."""
        with self._lock:
            self._subscribers[topic][handler] = None
            total = len(self._subscribers[topic])
        logger.info("Subscriber registered for topic '%s' (%d total)", topic, total)

    def unsubscribe(self, topic: str, handler: MessageHandler) -> None:
        """Remove *handler* from *topic*.  Unknown handlers are ignored."""
        with self._lock:
            handlers = self._subscribers.get(topic)
            if handlers is None:
                return
            handlers.pop(handler, None)
            if not handlers:
                del self._subscribers[topic]

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    # -- Publishing --------------------------------------------------------

    async def publish(self, topic: str, payload: Any) -> IntegrationMessage | None:
        """Schedule delivery of *payload* to every handler on *topic*."""
        with self._lock:
            handlers = tuple(self._subscribers.get(topic, ()))

        if not handlers:
            logger.debug("No subscribers for topic '%s', message dropped", topic)
            return None

        message = IntegrationMessage(topic=topic, payload=payload)
        self._history.append(message)
        logger.info(
            "Publishing message %s to topic '%s' (%d subscriber(s))",
            message.message_id, topic, len(handlers),
        )

        for handler in handlers:
            task = asyncio.create_task(
                self._deliver(handler, message),
                name=f"bus:{topic}:{message.message_id}",
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return message

    async def _deliver(self, handler: MessageHandler, message: IntegrationMessage) -> None:
        try:
            await handler(message)
            self._messages_delivered += 1
        except Exception as exc:
            self._error_counts[message.topic] += 1
            self._failures.append(
                HandlerFailure(
                    topic=message.topic,
                    message_id=message.message_id,
                    handler=_handler_name(handler),
                    error=str(exc),
                )
            )
            logger.exception(
                "Error in handler %s for topic '%s' message %s",
                _handler_name(handler), message.topic, message.message_id,
            )

            if self._on_handler_error is not None:
                try:
                    self._on_handler_error(message.topic, message.message_id, exc)
                except Exception:
                    logger.warning("on_handler_error callback failed", exc_info=True)

    # -- Lifecycle ---------------------------------------------------------

    async def drain(self) -> None:
        """Wait until every in-flight delivery has finished.

        Handlers may publish further messages while draining; those are
        awaited too.
        """
        while self._pending:
            await asyncio.gather(*tuple(self._pending), return_exceptions=True)

    async def stop(self) -> None:
        await self.drain()

    # -- Observability -----------------------------------------------------

    @property
    def pending_deliveries(self) -> int:
        return len(self._pending)

    @property
    def messages_delivered(self) -> int:
        """Total handler invocations that completed without raising."""
        return self._messages_delivered

    def get_error_counts(self) -> dict[str, int]:
        """Return per-topic handler error counts."""
        return dict(self._error_counts)

    @property
    def failures(self) -> list[HandlerFailure]:
        """Snapshot of recorded handler failures."""
        return list(self._failures)

    def clear_failures(self) -> list[HandlerFailure]:
        """Drain the failure list and return all entries."""
        drained = list(self._failures)
        self._failures.clear()
        return drained

    # -- Testing helpers ---------------------------------------------------

    def get_history(self, topic: str | None = None) -> list[IntegrationMessage]:
        """Most recent published (non-dropped) messages, optionally by topic."""
        if topic is None:
            return list(self._history)
        return [m for m in self._history if m.topic == topic]

    def clear_history(self) -> None:
        self._history.clear()
