"""Configuration management."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Throttle interval shared by every trigger source (five minutes)
DEFAULT_NOTIFICATION_INTERVAL_MS = 5 * 60 * 1000


@dataclass
class GerritConfig:
    """Remote change list configuration."""
    origin: str                   # e.g. "https://review.example.org"
    query: str                    # e.g. "attention:self"
    limit: int                    # maximum changes per fetch
    options: str                  # hex ListChangesOption bitmask
    username: Optional[str] = None
    http_password: Optional[str] = None


@dataclass
class StateConfig:
    """Durable worker state configuration."""
    backend: str                  # "sqlite" or "dynamodb"
    db_path: str
    dynamodb_table: str
    region: str


@dataclass
class TwilioConfig:
    """Twilio SMS configuration."""
    account_sid: str
    auth_token: str
    from_number: str
    to_number: str


@dataclass
class SESConfig:
    """AWS SES email configuration."""
    from_email: str
    to_email: str
    region: str


@dataclass
class PresentationConfig:
    """How notification intents are shown."""
    method: str                   # "log", "sms" or "email"
    twilio: Optional[TwilioConfig] = None
    ses: Optional[SESConfig] = None


@dataclass
class AppConfig:
    """Complete application configuration."""
    gerrit: GerritConfig
    state: StateConfig
    presentation: PresentationConfig
    notification_interval_ms: int = DEFAULT_NOTIFICATION_INTERVAL_MS


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.

    Raises:
        ValueError: If required configuration values are missing.
    """
    missing = []

    # Remote system
    origin = (os.getenv("GERRIT_ORIGIN") or "").rstrip("/")
    if not origin:
        missing.append("GERRIT_ORIGIN")
    gerrit = GerritConfig(
        origin=origin,
        query=os.getenv("CHANGE_QUERY", "attention:self"),
        limit=int(os.getenv("CHANGE_QUERY_LIMIT", "25")),
        options=os.getenv("CHANGE_QUERY_OPTIONS", "1000081"),
        username=os.getenv("GERRIT_USERNAME") or None,
        http_password=os.getenv("GERRIT_HTTP_PASSWORD") or None,
    )

    region = os.getenv("AWS_REGION", "us-east-1")

    # Worker state
    backend = os.getenv("STATE_BACKEND", "sqlite").lower()
    if backend not in ("sqlite", "dynamodb"):
        raise ValueError(f"Unsupported STATE_BACKEND '{backend}' (expected sqlite or dynamodb)")
    state = StateConfig(
        backend=backend,
        db_path=os.getenv("DB_PATH", "notifier_state.db"),
        dynamodb_table=os.getenv("DYNAMODB_TABLE_WORKER_STATE", "worker_state"),
        region=region,
    )

    # Presentation
    method = os.getenv("NOTIFICATION_METHOD", "log").lower()
    twilio = None
    ses = None
    if method == "sms":
        twilio_values = {
            "TWILIO_ACCOUNT_SID": os.getenv("TWILIO_ACCOUNT_SID"),
            "TWILIO_AUTH_TOKEN": os.getenv("TWILIO_AUTH_TOKEN"),
            "TWILIO_FROM_NUMBER": os.getenv("TWILIO_FROM_NUMBER"),
            "TWILIO_TO_NUMBER": os.getenv("TWILIO_TO_NUMBER"),
        }
        missing.extend(key for key, value in twilio_values.items() if not value)
        twilio = TwilioConfig(
            account_sid=twilio_values["TWILIO_ACCOUNT_SID"],
            auth_token=twilio_values["TWILIO_AUTH_TOKEN"],
            from_number=twilio_values["TWILIO_FROM_NUMBER"],
            to_number=twilio_values["TWILIO_TO_NUMBER"],
        )
    elif method == "email":
        ses_from = os.getenv("SES_FROM_EMAIL")
        ses_to = os.getenv("NOTIFICATION_EMAIL")
        if not ses_from:
            missing.append("SES_FROM_EMAIL")
        if not ses_to:
            missing.append("NOTIFICATION_EMAIL")
        ses = SESConfig(from_email=ses_from, to_email=ses_to, region=region)
    elif method != "log":
        raise ValueError(f"Unsupported NOTIFICATION_METHOD '{method}' (expected log, sms or email)")

    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return AppConfig(
        gerrit=gerrit,
        state=state,
        presentation=PresentationConfig(method=method, twilio=twilio, ses=ses),
        notification_interval_ms=int(
            os.getenv("NOTIFICATION_INTERVAL_MS", str(DEFAULT_NOTIFICATION_INTERVAL_MS))
        ),
    )
