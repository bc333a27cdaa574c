"""Client for the remote change list endpoint."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .config import GerritConfig
from .exceptions import FetchError
from .models import AttentionEntry, ChangeSummary

logger = logging.getLogger(__name__)

# Prepended to every JSON response to defeat cross-site script inclusion
JSON_PREFIX = ")]}'"


def parse_timestamp_ms(value: str) -> int:
    """
    Convert a remote timestamp to epoch milliseconds.

    The remote format is "YYYY-MM-DD hh:mm:ss.nnnnnnnnn" in UTC; fractional
    digits beyond microseconds are dropped.
    """
    base, _, fraction = value.strip().partition(".")
    dt = datetime.strptime(base, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
    micros = int((fraction[:6] or "0").ljust(6, "0"))
    return int(dt.timestamp()) * 1000 + micros // 1000


def _account_name(account: Optional[Dict[str, Any]]) -> Optional[str]:
    if not account:
        return None
    return account.get("display_name") or account.get("name") or account.get("email") or account.get("username")


def parse_change(data: Dict[str, Any]) -> ChangeSummary:
    """Build a ChangeSummary from a ChangeInfo JSON object."""
    entries = {}
    for key, info in (data.get("attention_set") or {}).items():
        try:
            account_id = int((info.get("account") or {}).get("_account_id", key))
            reason_account = info.get("reason_account") or {}
            entries[account_id] = AttentionEntry(
                reason=info.get("reason", ""),
                updated_at_ms=parse_timestamp_ms(info["last_update"]),
                reason_account_id=reason_account.get("_account_id"),
                reason_account_name=_account_name(reason_account),
            )
        except (KeyError, ValueError, TypeError) as e:
            # One malformed entry must not hide the rest of the change
            logger.debug(f"Skipping attention entry {key} on change {data.get('id')}: {e}")
            continue

    return ChangeSummary(
        id=data.get("id", ""),
        number=int(data.get("_number", 0)),
        project=data.get("project", ""),
        subject=data.get("subject", ""),
        attention_entries=entries,
    )


def read_response_payload(text: str) -> Any:
    """Strip the JSON prefix and decode the body."""
    if text.startswith(JSON_PREFIX):
        text = text[len(JSON_PREFIX):]
    return json.loads(text)


class ChangeClient:
    """Fetches changes where the signed-in account is in the attention set."""

    def __init__(self, config: GerritConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    @property
    def url(self) -> str:
        # Authenticated REST calls live under /a/
        prefix = "/a" if self.config.username else ""
        return f"{self.config.origin}{prefix}/changes/"

    @property
    def params(self) -> Dict[str, Any]:
        return {
            "O": self.config.options,
            "S": 0,
            "n": self.config.limit,
            "q": self.config.query,
        }

    async def fetch_attention_changes(self) -> List[ChangeSummary]:
        """
        Fetch the latest attention set changes.

        Returns:
            Unfiltered list of changes, in response order.

        Raises:
            FetchError: If the request fails or the payload cannot be decoded.
        """
        auth = None
        if self.config.username and self.config.http_password:
            auth = (self.config.username, self.config.http_password)

        # No timeout: a hung fetch only blocks its own cycle
        async with httpx.AsyncClient(transport=self.transport, auth=auth, timeout=None) as client:
            try:
                response = await client.get(self.url, params=self.params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise FetchError(f"Error fetching changes from {self.url}: {e}") from e

        try:
            payload = read_response_payload(response.text)
        except ValueError as e:
            raise FetchError(f"Malformed change list from {self.url}: {e}") from e

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise FetchError(f"Unexpected change list payload type {type(payload).__name__}")

        changes = [parse_change(item) for item in payload if isinstance(item, dict)]
        logger.info(f"Fetched {len(changes)} attention set changes")
        return changes
