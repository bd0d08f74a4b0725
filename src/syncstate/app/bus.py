"""
Event Bus

In-process publication of ``SyncEvent``s to display layers and other
collaborators. Publishing is synchronous so that state changes are
visible to handlers immediately; coroutine handlers are scheduled on the
running event loop.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Set, Union

from .events import SyncEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SyncEvent], Union[None, Awaitable[None]]]


class EventBus(ABC):
    """Abstract base class for event buses."""

    @abstractmethod
    def publish(self, event: SyncEvent) -> None:
        """Publish an event to all subscribers."""
        pass

    @abstractmethod
    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Subscribe a handler to receive events."""
        pass

    async def drain(self) -> None:
        """Wait for in-flight deliveries; nothing to wait for by default."""
        return None


class InProcessBus(EventBus):
    """
    Simple in-process event bus.

    A handler that raises is logged and does not prevent the remaining
    handlers from receiving the event.
    """

    def __init__(self):
        self._subscribers: List[EventHandler] = []
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """
        Subscribe a handler to receive all events.

        Args:
            handler: Function or coroutine function that accepts a SyncEvent

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(handler)
        return lambda: self.unsubscribe(handler)

    def publish(self, event: SyncEvent) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: The event to deliver
        """
        for handler in list(self._subscribers):
            try:
                result = handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event.name)
                continue

            if inspect.isawaitable(result):
                self._schedule(handler, event, result)

    def _schedule(self, handler: EventHandler, event: SyncEvent, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, dropping async handler %r for %s", handler, event.name)
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = loop.create_task(self._run(handler, event, awaitable))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, handler: EventHandler, event: SyncEvent, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except Exception:
            logger.exception("Async event handler %r failed for %s", handler, event.name)

    async def drain(self) -> None:
        """Wait for scheduled async handlers to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def unsubscribe(self, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from receiving events.

        Args:
            handler: Handler function to remove
        """
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def clear_subscribers(self) -> None:
        """Remove all subscribers."""
        self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)


__all__ = ["EventBus", "InProcessBus", "EventHandler"]
