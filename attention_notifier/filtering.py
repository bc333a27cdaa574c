"""Selection of changes that are new for an account."""

from typing import Iterable, List

from .models import Account, ChangeSummary


def filter_attention_changes_after(
    changes: Iterable[ChangeSummary],
    account: Account,
    cutoff_ms: int,
) -> List[ChangeSummary]:
    """
    Keep changes whose attention entry for ``account`` was updated after the cutoff.

    The cutoff is exclusive. Changes without an entry for the account are
    dropped. Input order is preserved.
    """
    latest = []
    for change in changes:
        entry = change.attention_entries.get(account.id)
        if entry is None:
            continue
        if entry.updated_at_ms > cutoff_ms:
            latest.append(change)
    return latest
