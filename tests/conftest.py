"""Shared fakes for the host capabilities and collaborators."""

from typing import List, Optional

import pytest

from attention_notifier.exceptions import StoreUnavailableError
from attention_notifier.host import NotificationPresenter, WindowClient, WindowClients
from attention_notifier.models import Account, AttentionEntry, ChangeSummary, ShownNotification, WorkerState
from attention_notifier.state_store import StateManager, StateStore
from attention_notifier.worker import NotificationWorker

ORIGIN = "https://review.example.org"
ACCOUNT_ID = 1000


def make_change(change_id: str, updated_at_ms: Optional[int], account_id: int = ACCOUNT_ID,
                subject: Optional[str] = None, number: int = 1, reason: str = "Reviewer was added") -> ChangeSummary:
    entries = {}
    if updated_at_ms is not None:
        entries[account_id] = AttentionEntry(reason=reason, updated_at_ms=updated_at_ms)
    return ChangeSummary(
        id=f"test-project~{number}",
        number=number,
        project="test-project",
        subject=subject or f"Change {change_id}",
        attention_entries=entries,
    )


class FakeStore(StateStore):
    def __init__(self, timestamp: Optional[int] = None, events: Optional[list] = None):
        self.state = WorkerState(timestamp) if timestamp is not None else None
        self.events = events if events is not None else []
        self.writes: List[int] = []
        self.fail_read = False
        self.fail_write = False

    def read(self):
        if self.fail_read:
            raise StoreUnavailableError("store is down")
        return self.state

    def write(self, state):
        if self.fail_write:
            raise StoreUnavailableError("store is down")
        self.events.append(("write", state.latest_update_timestamp_ms))
        self.writes.append(state.latest_update_timestamp_ms)
        self.state = state

    def clear(self):
        self.state = None


class FakeChangeClient:
    def __init__(self, changes=None, error: Optional[Exception] = None, events: Optional[list] = None):
        self.changes = changes or []
        self.error = error
        self.events = events if events is not None else []
        self.calls = 0

    async def fetch_attention_changes(self):
        self.calls += 1
        self.events.append(("fetch",))
        if self.error:
            raise self.error
        return list(self.changes)


class FakePresenter(NotificationPresenter):
    def __init__(self):
        self.shown: List[ShownNotification] = []
        self.closed: List[ShownNotification] = []
        self.fail_show = False
        self.fail_close = False

    def show_notification(self, title, body, data):
        if self.fail_show:
            raise RuntimeError("notifications are not permitted")
        notification = ShownNotification(title=title, body=body, data=dict(data))
        self.shown.append(notification)
        return notification

    def close_notification(self, notification):
        if self.fail_close:
            raise RuntimeError("cannot close")
        self.closed.append(notification)


class FakeWindow(WindowClient):
    def __init__(self, url: str, fail_focus: bool = False):
        self._url = url
        self.fail_focus = fail_focus
        self.focus_count = 0

    @property
    def url(self):
        return self._url

    async def focus(self):
        if self.fail_focus:
            raise RuntimeError("focus denied")
        self.focus_count += 1


class FakeWindows(WindowClients):
    def __init__(self, windows=None):
        self.windows: List[FakeWindow] = list(windows or [])
        self.opened: List[FakeWindow] = []
        self.fail_match = False
        self.refuse_open = False

    async def match_all(self):
        if self.fail_match:
            raise RuntimeError("cannot enumerate windows")
        return list(self.windows)

    async def open_window(self, url):
        if self.refuse_open:
            return None
        window = FakeWindow(url)
        self.opened.append(window)
        self.windows.append(window)
        return window


@pytest.fixture
def account():
    return Account(id=ACCOUNT_ID, name="Alice")


@pytest.fixture
def events():
    return []


@pytest.fixture
def store(events):
    return FakeStore(events=events)


@pytest.fixture
def change_client(events):
    return FakeChangeClient(events=events)


@pytest.fixture
def presenter():
    return FakePresenter()


@pytest.fixture
def windows():
    return FakeWindows()


@pytest.fixture
def clock():
    class Clock:
        now = 0

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def worker(store, change_client, presenter, windows, clock):
    return NotificationWorker(
        state=StateManager(store),
        change_client=change_client,
        presenter=presenter,
        origin=ORIGIN,
        interval_ms=5000,
        windows=windows,
        clock=clock,
    )
