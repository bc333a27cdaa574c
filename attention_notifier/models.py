"""Data models for the notification worker."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# "Never checked" marker; every attention update is newer than this
NEVER = 0

CHECK_NOTIFICATIONS = "check-notifications"
NOTIFICATION_CLICK = "notification-click"


@dataclass
class WorkerState:
    """The single durable record kept per origin."""
    latest_update_timestamp_ms: int = NEVER

    def to_dict(self) -> Dict[str, int]:
        return {"latestUpdateTimestampMs": self.latest_update_timestamp_ms}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkerState":
        return cls(latest_update_timestamp_ms=int(data.get("latestUpdateTimestampMs", NEVER)))


@dataclass
class Account:
    """Account the check runs for. Only the id is used for relevance."""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Account"]:
        """Build an account from a message payload, or None when it carries no id."""
        if not data:
            return None
        if not isinstance(data, dict):
            logger.info(f"Ignoring account payload of type {type(data).__name__}")
            return None
        account_id = data.get("_account_id", data.get("id"))
        if account_id is None or account_id == "":
            return None
        try:
            account_id = int(account_id)
        except (ValueError, TypeError):
            logger.info(f"Ignoring account with non-numeric id {account_id!r}")
            return None
        return cls(
            id=account_id,
            name=data.get("name"),
            email=data.get("email"),
        )


@dataclass
class AttentionEntry:
    """Per-account attention marker on a change."""
    reason: str
    updated_at_ms: int
    reason_account_id: Optional[int] = None
    reason_account_name: Optional[str] = None


@dataclass
class ChangeSummary:
    """A change returned by the remote list endpoint."""
    id: str            # "project~number"
    number: int
    project: str
    subject: str
    attention_entries: Dict[int, AttentionEntry] = field(default_factory=dict)


class NotificationKind(Enum):
    PER_ITEM = "per-item"
    AGGREGATE = "aggregate"


@dataclass
class NotificationIntent:
    """The one notification (if any) to show for a cycle."""
    kind: NotificationKind
    title: str
    body: Optional[str]
    target_url: str

    @property
    def data(self) -> Dict[str, str]:
        # Attached to the shown notification and handed back on activation
        return {"url": self.target_url}


@dataclass
class ShownNotification:
    """Handle to a notification the presenter has displayed."""
    title: str
    body: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TriggerEvent:
    """Inbound request to check for new attention changes."""
    account: Optional[Account]
    kind: str = CHECK_NOTIFICATIONS

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> Optional["TriggerEvent"]:
        """Parse a client message. Other message types are not errors, just not ours."""
        if not isinstance(message, dict) or message.get("type") != CHECK_NOTIFICATIONS:
            return None
        return cls(account=Account.from_dict(message.get("account")))


@dataclass
class ActivationEvent:
    """A shown notification was clicked."""
    notification: ShownNotification
    kind: str = NOTIFICATION_CLICK

    @property
    def target_url(self) -> Optional[str]:
        return self.notification.data.get("url")
