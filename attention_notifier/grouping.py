"""Collapsing of new attention changes into a single notification."""

from typing import Optional, Sequence

from .models import Account, ChangeSummary, NotificationIntent, NotificationKind
from .reasons import get_reason
from .urls import create_change_url, create_dashboard_url


def build_notification_intent(
    changes: Sequence[ChangeSummary],
    account: Account,
    origin: str,
) -> Optional[NotificationIntent]:
    """
    Build the notification for a cycle.

    One change gets its own notification pointing at the change. Several
    changes get one notification with the count, pointing at the dashboard,
    so a long dormant worker does not flood the user.

    Returns:
        The intent, or None when there is nothing to notify about.
    """
    if not changes:
        return None

    if len(changes) == 1:
        change = changes[0]
        return NotificationIntent(
            kind=NotificationKind.PER_ITEM,
            title=change.subject,
            body=get_reason(account, change),
            target_url=create_change_url(origin, change),
        )

    return NotificationIntent(
        kind=NotificationKind.AGGREGATE,
        title=f"You are in the attention set for {len(changes)} changes.",
        body=None,
        target_url=create_dashboard_url(origin),
    )
