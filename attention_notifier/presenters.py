"""Notification presenters for hosts without a native notification area."""

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError
from twilio.rest import Client

from .config import PresentationConfig, SESConfig, TwilioConfig
from .host import NotificationPresenter
from .models import ShownNotification

logger = logging.getLogger(__name__)


def format_message(title: str, body: Optional[str], data: Dict[str, Any]) -> str:
    """Render a notification as plain text with its link on the last line."""
    lines = [title]
    if body:
        lines.append(body)
    if data.get("url"):
        lines.append(data["url"])
    return "\n".join(lines)


class LogPresenter(NotificationPresenter):
    """Writes notifications to the log. Useful for dry runs."""

    def show_notification(self, title: str, body: Optional[str], data: Dict[str, Any]) -> ShownNotification:
        logger.info(f"Notification: {format_message(title, body, data)!r}")
        return ShownNotification(title=title, body=body, data=dict(data))

    def close_notification(self, notification: ShownNotification) -> None:
        logger.debug(f"Dismissed notification '{notification.title}'")


class SmsPresenter(NotificationPresenter):
    """Sends notifications as SMS via Twilio."""

    def __init__(self, config: TwilioConfig, client=None):
        self.config = config
        self.client = client or Client(config.account_sid, config.auth_token)

    def show_notification(self, title: str, body: Optional[str], data: Dict[str, Any]) -> ShownNotification:
        message = format_message(title, body, data)
        try:
            message_obj = self.client.messages.create(
                body=message,
                from_=self.config.from_number,
                to=self.config.to_number,
            )
        except Exception as e:
            error_str = str(e)
            if "20003" in error_str or "Authenticate" in error_str or "401" in error_str:
                logger.error(
                    "Twilio authentication failed (Error 20003). "
                    "Check TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN. "
                    f"Current Account SID (first 10 chars): {self.config.account_sid[:10]}..."
                )
            else:
                logger.error(f"Failed to send SMS: {e}")
            raise
        logger.info(f"SMS sent successfully. SID: {message_obj.sid}")
        logger.debug(f"Message preview: {message[:50]}...")
        return ShownNotification(title=title, body=body, data=dict(data))

    def close_notification(self, notification: ShownNotification) -> None:
        # A delivered SMS cannot be retracted
        logger.debug(f"Nothing to dismiss for SMS '{notification.title}'")


class EmailPresenter(NotificationPresenter):
    """Sends notifications as email via AWS SES."""

    def __init__(self, config: SESConfig, ses=None):
        self.config = config
        self.ses = ses or boto3.client("ses", region_name=config.region)

    def show_notification(self, title: str, body: Optional[str], data: Dict[str, Any]) -> ShownNotification:
        try:
            response = self.ses.send_email(
                Source=self.config.from_email,
                Destination={"ToAddresses": [self.config.to_email]},
                Message={
                    "Subject": {"Data": title},
                    "Body": {"Text": {"Data": format_message(title, body, data)}},
                },
            )
        except ClientError as e:
            logger.error(f"Error sending email: {e}")
            raise
        logger.info(f"Email sent to {self.config.to_email}: {response['MessageId']}")
        return ShownNotification(title=title, body=body, data=dict(data))

    def close_notification(self, notification: ShownNotification) -> None:
        logger.debug(f"Nothing to dismiss for email '{notification.title}'")


def create_presenter(config: PresentationConfig) -> NotificationPresenter:
    """Create a presenter based on configuration."""
    if config.method == "sms":
        return SmsPresenter(config.twilio)
    if config.method == "email":
        return EmailPresenter(config.ses)
    return LogPresenter()
