"""Event bus: publish/subscribe plus single-handler request/reply."""

import inspect
import logging
from typing import Any, Callable

from .exceptions import NoHandlerRegisteredError

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Any]
Handler = Callable[[Any], Any]


async def _resolve(result: Any) -> Any:
    """Await the result if the callback was a coroutine function."""
    if inspect.isawaitable(result):
        return await result
    return result


class EventBus:
    """
    Topic-addressed messaging between components that hold no references
    to each other.

    Subscribers are passive and additive; each topic may also have one reply
    handler, which `request` calls. Callbacks may be plain functions or
    coroutine functions.
    """

    def __init__(self):
        # Map: topic -> callbacks in subscription order
        self._subscribers: dict[str, list[Callback]] = {}
        # Map: topic -> reply handler
        self._handlers: dict[str, Handler] = {}

    # ========================================================================
    # Publish / subscribe
    # ========================================================================

    def subscribe(self, topic: str, callback: Callback) -> None:
        """Register a callback for every publish on topic."""
        self._subscribers.setdefault(topic, []).append(callback)
        logger.debug(f"Subscribed {_name(callback)} to '{topic}'")

    def unsubscribe(self, topic: str, callback: Callback) -> None:
        """Remove one registration of callback from topic."""
        callbacks = self._subscribers.get(topic)
        if not callbacks or callback not in callbacks:
            return

        callbacks.remove(callback)
        if not callbacks:
            del self._subscribers[topic]
        logger.debug(f"Unsubscribed {_name(callback)} from '{topic}'")

    async def publish(self, topic: str, payload: Any = None) -> None:
        """
        Deliver payload to every subscriber of topic, in subscription order.
        A failing subscriber is logged and skipped.
        """
        # Snapshot so callbacks may unsubscribe while being delivered to
        callbacks = list(self._subscribers.get(topic, ()))

        for callback in callbacks:
            try:
                await _resolve(callback(payload))
            except Exception:
                logger.exception(f"Subscriber {_name(callback)} failed on topic '{topic}'")

        if callbacks:
            logger.debug(f"Published to {len(callbacks)} subscribers on '{topic}'")

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    # ========================================================================
    # Request / reply
    # ========================================================================

    def handle(self, topic: str, handler: Handler) -> None:
        """Install the reply handler for topic, replacing any previous one."""
        if topic in self._handlers:
            logger.info(f"Replacing handler for '{topic}'")
        self._handlers[topic] = handler
        logger.info(f"Handler installed for '{topic}': {_name(handler)}")

    def unhandle(self, topic: str) -> None:
        """Remove the reply handler for topic."""
        if self._handlers.pop(topic, None) is not None:
            logger.info(f"Handler removed for '{topic}'")

    def has_handler(self, topic: str) -> bool:
        return topic in self._handlers

    async def request(self, topic: str, payload: Any = None) -> Any:
        """
        Deliver payload to the handler for topic and return its result.
        Raises NoHandlerRegisteredError if none is installed; handler errors propagate.
        """
        handler = self._handlers.get(topic)
        if handler is None:
            raise NoHandlerRegisteredError(topic)
        return await _resolve(handler(payload))


def _name(callback: Callable) -> str:
    return getattr(callback, "__qualname__", None) or type(callback).__name__
