"""The notification worker: check cycles and notification activation."""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from .change_client import ChangeClient
from .config import AppConfig
from .exceptions import FetchError
from .filtering import filter_attention_changes_after
from .grouping import build_notification_intent
from .host import Dispatcher, ExtendableEvent, NotificationPresenter, WindowClients
from .models import (
    CHECK_NOTIFICATIONS,
    NOTIFICATION_CLICK,
    Account,
    ActivationEvent,
    ChangeSummary,
    NotificationIntent,
    TriggerEvent,
)
from .presenters import create_presenter
from .state_store import DynamoDBStateStore, SQLiteStateStore, StateManager
from .throttle import decide

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class NotificationWorker:
    """
    Checks for new attention set changes and routes notification clicks.

    An instance may be thrown away by the host between any two events, so the
    worker keeps nothing of its own between cycles: the last update timestamp
    is read from the state store at the start of every cycle.

    Concurrent workers against the same store are not excluded from each
    other. Two triggers closer than the interval collapse into one fetch; two
    racing triggers further apart may both report the same change. Both are
    accepted.
    """

    def __init__(
        self,
        state: StateManager,
        change_client: ChangeClient,
        presenter: NotificationPresenter,
        origin: str,
        interval_ms: int,
        windows: Optional[WindowClients] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.state = state
        self.change_client = change_client
        self.presenter = presenter
        self.origin = origin
        self.interval_ms = interval_ms
        self.windows = windows
        self.clock = clock

    def init(self, dispatcher: Optional[Dispatcher] = None) -> Dispatcher:
        """Register the worker's handlers and return the dispatcher."""
        dispatcher = dispatcher or Dispatcher()
        dispatcher.register_handler(CHECK_NOTIFICATIONS, self.on_message)
        dispatcher.register_handler(NOTIFICATION_CLICK, self.on_notification_click)
        return dispatcher

    def on_message(self, event: ExtendableEvent) -> None:
        trigger: TriggerEvent = event.data
        event.wait_until(self.show_latest_attention_change_notification(trigger.account))

    def on_notification_click(self, event: ExtendableEvent) -> None:
        activation: ActivationEvent = event.data
        event.wait_until(self.handle_activation(activation))

    async def handle_activation(self, activation: ActivationEvent) -> None:
        """Dismiss the notification, then route to its target window."""
        # Dismissed regardless of whether routing succeeds
        try:
            await asyncio.to_thread(self.presenter.close_notification, activation.notification)
        except Exception as e:
            logger.error(f"Cannot close notification '{activation.notification.title}': {e}")
        await self.open_window(activation.target_url)

    async def show_latest_attention_change_notification(
        self, account: Optional[Account], force: bool = False
    ) -> Optional[NotificationIntent]:
        """
        Run one check cycle for ``account``.

        Returns:
            The intent that was shown, or None if nothing was shown.
        """
        # Triggers always carry an account, but a missing one is not an error
        if account is None:
            logger.info("Trigger without account id, skipping")
            return None

        changes = await self.get_changes_to_notify(account, force=force)
        intent = build_notification_intent(changes, account, self.origin)
        if intent is None:
            logger.info(f"No new attention set changes for account {account.id}")
            return None

        try:
            await asyncio.to_thread(
                self.presenter.show_notification, intent.title, intent.body, intent.data
            )
        except Exception as e:
            logger.error(f"Cannot show notification '{intent.title}': {e}")
            return None

        logger.info(f"Showed {intent.kind.value} notification for {len(changes)} change(s)")
        return intent

    async def get_changes_to_notify(self, account: Account, force: bool = False) -> List[ChangeSummary]:
        """
        Throttle, fetch and filter.

        The new timestamp is written before the fetch so that near-simultaneous
        triggers from other clients see it and skip their own fetch. If the
        fetch then fails, the changes it covered are not reported; there is no
        rollback.
        """
        previous_ms = await self.state.load()
        current_ms = self.clock()
        decision = decide(current_ms, previous_ms, 0 if force else self.interval_ms)
        if not decision.proceed:
            logger.info(
                f"Throttled: last check {current_ms - previous_ms} ms ago "
                f"(interval {self.interval_ms} ms)"
            )
            return []

        await self.state.save(decision.new_timestamp_ms)

        try:
            changes = await self.change_client.fetch_attention_changes()
        except FetchError as e:
            logger.error(f"Error fetching attention set changes: {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error fetching attention set changes: {e}", exc_info=True)
            return []

        latest = filter_attention_changes_after(changes, account, decision.cutoff_ms)
        logger.info(
            f"{len(latest)} of {len(changes)} changes updated after {decision.cutoff_ms} "
            f"for account {account.id}"
        )
        return latest

    async def open_window(self, url: Optional[str]) -> None:
        """Focus a window already showing ``url``, or open and focus a new one."""
        if not url:
            return
        if self.windows is None:
            logger.warning(f"Host provides no windows, cannot open {url}")
            return
        try:
            clients = await self.windows.match_all()
            client = next((c for c in clients if c.url == url), None)
            if client is None:
                client = await self.windows.open_window(url)
            if client is not None:
                await client.focus()
        except Exception as e:
            # The user can still navigate there by hand
            logger.error(f"Cannot open window about notified change - {e}")


def create_worker(
    config: AppConfig,
    windows: Optional[WindowClients] = None,
    presenter: Optional[NotificationPresenter] = None,
) -> NotificationWorker:
    """
    Create a worker wired from configuration.

    Only hosts that pass ``windows`` can route clicks; such hosts must dispatch
    ``notification-click`` events to the worker themselves.
    """
    origin = config.gerrit.origin
    if config.state.backend == "dynamodb":
        store = DynamoDBStateStore(config.state.dynamodb_table, origin, region=config.state.region)
    else:
        store = SQLiteStateStore(config.state.db_path, origin)

    return NotificationWorker(
        state=StateManager(store),
        change_client=ChangeClient(config.gerrit),
        presenter=presenter or create_presenter(config.presentation),
        origin=origin,
        interval_ms=config.notification_interval_ms,
        windows=windows,
    )
