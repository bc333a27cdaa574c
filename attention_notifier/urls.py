"""Navigable addresses for changes and the dashboard."""

from urllib.parse import quote, urlencode

from .models import ChangeSummary

NOTIFICATION_USP = "service-worker-notification"


def create_change_url(origin: str, change: ChangeSummary, usp: str = NOTIFICATION_USP) -> str:
    # Origin is included because every origin keeps its own worker state
    path = f"/c/{quote(change.project, safe='/')}/+/{change.number}"
    if usp:
        path += "?" + urlencode({"usp": usp})
    return f"{origin}{path}"


def create_dashboard_url(origin: str) -> str:
    return f"{origin}/dashboard/self"
