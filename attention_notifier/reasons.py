"""Human-readable attention reasons."""

import re
from typing import Optional

from .models import Account, ChangeSummary

ACCOUNT_PLACEHOLDER = re.compile(r"<GERRIT_ACCOUNT_(\d+)>")
DEFAULT_REASON = "Awaiting your attention"


def get_reason(account: Account, change: ChangeSummary) -> Optional[str]:
    """Describe why ``account`` is in the attention set of ``change``."""
    entry = change.attention_entries.get(account.id)
    if entry is None:
        return None
    if not entry.reason:
        return DEFAULT_REASON

    def _name(match: re.Match) -> str:
        account_id = int(match.group(1))
        if account_id == entry.reason_account_id and entry.reason_account_name:
            return entry.reason_account_name
        return f"Gerrit Account {account_id}"

    return ACCOUNT_PLACEHOLDER.sub(_name, entry.reason)
