"""Throttling of check cycles across triggers."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ThrottleDecision:
    """Outcome of the throttle check for one trigger."""
    proceed: bool
    cutoff_ms: Optional[int] = None      # exclusive lower bound for new changes
    new_timestamp_ms: Optional[int] = None


def decide(now_ms: int, previous_timestamp_ms: int, interval_ms: int) -> ThrottleDecision:
    """
    Decide whether a check cycle should run now.

    Many clients trigger the same worker, so a cycle only runs when at least
    ``interval_ms`` has passed since the last one started.

    Args:
        now_ms: Current time in epoch milliseconds.
        previous_timestamp_ms: Timestamp persisted by the previous cycle.
        interval_ms: Minimum spacing between cycles.

    Returns:
        A decision. When it proceeds, ``cutoff_ms`` is the previous timestamp
        and ``new_timestamp_ms`` is the value to persist before fetching.
    """
    if now_ms - previous_timestamp_ms < interval_ms:
        return ThrottleDecision(proceed=False)
    return ThrottleDecision(
        proceed=True,
        cutoff_ms=previous_timestamp_ms,
        new_timestamp_ms=now_ms,
    )
