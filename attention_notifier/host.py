"""Capabilities provided by the host the worker runs in.

The worker never reaches for ambient globals: notifications, windows and the
lifetime of the execution context are all handed to it through these
interfaces, so each can be replaced in tests.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .models import ShownNotification

logger = logging.getLogger(__name__)


class NotificationPresenter(ABC):
    """Shows and dismisses notifications."""

    @abstractmethod
    def show_notification(self, title: str, body: Optional[str], data: Dict[str, Any]) -> ShownNotification:
        """
        Display a notification.

        Args:
            title: Notification title.
            body: Optional body text.
            data: Opaque data handed back when the notification is activated.

        Returns:
            A handle to the shown notification.
        """

    @abstractmethod
    def close_notification(self, notification: ShownNotification) -> None:
        """Dismiss a previously shown notification."""


class WindowClient(ABC):
    """An open window of the same origin."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Address currently shown in the window."""

    @abstractmethod
    async def focus(self) -> None:
        """Bring the window to the foreground."""


class WindowClients(ABC):
    """Enumerates and opens windows."""

    @abstractmethod
    async def match_all(self) -> List[WindowClient]:
        """Return all open windows of the same origin."""

    @abstractmethod
    async def open_window(self, url: str) -> Optional[WindowClient]:
        """Open a new window at ``url``. May return None if the host refuses."""


class ExtendableEvent:
    """
    An inbound event whose handling may outlive the handler call.

    Handlers pass their work to ``wait_until``; the host must await
    ``settled()`` before it lets the execution context go, otherwise the work
    may be cut off mid-flight.
    """

    def __init__(self, kind: str, data: Any):
        self.kind = kind
        self.data = data
        self._pending: List[asyncio.Future] = []

    def wait_until(self, awaitable: Awaitable) -> None:
        self._pending.append(asyncio.ensure_future(awaitable))

    async def settled(self) -> List[Any]:
        """Wait for all extended work. Returns the results of the work that succeeded."""
        results = await asyncio.gather(*self._pending, return_exceptions=True)
        completed = []
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"Unhandled error while handling {self.kind}: {result!r}")
            else:
                completed.append(result)
        return completed


Handler = Callable[[ExtendableEvent], None]


class Dispatcher:
    """Explicit event-kind to handler table."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def register_handler(self, event_kind: str, handler: Handler) -> None:
        self._handlers[event_kind] = handler

    def dispatch(self, event_kind: str, data: Any) -> ExtendableEvent:
        """
        Deliver an event to its handler. Must be called from a running event loop.

        Unknown event kinds are logged and ignored.
        """
        event = ExtendableEvent(event_kind, data)
        handler = self._handlers.get(event_kind)
        if handler is None:
            logger.warning(f"No handler registered for event '{event_kind}', ignoring")
            return event
        handler(event)
        return event
