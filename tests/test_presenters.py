from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from attention_notifier.config import PresentationConfig, SESConfig, TwilioConfig
from attention_notifier.presenters import (
    EmailPresenter,
    LogPresenter,
    SmsPresenter,
    create_presenter,
    format_message,
)

URL = "https://review.example.org/dashboard/self"


def _twilio_config():
    return TwilioConfig(account_sid="AC1234567890", auth_token="t", from_number="+100", to_number="+200")


def _ses_config():
    return SESConfig(from_email="bot@example.org", to_email="alice@example.org", region="us-east-1")


def test_format_message():
    assert format_message("Title", "Body", {"url": URL}) == f"Title\nBody\n{URL}"
    assert format_message("Title", None, {}) == "Title"


def test_sms_presenter_sends_message():
    client = MagicMock()
    client.messages.create.return_value.sid = "SM1"
    presenter = SmsPresenter(_twilio_config(), client=client)

    shown = presenter.show_notification("Title", None, {"url": URL})

    client.messages.create.assert_called_once_with(
        body=f"Title\n{URL}", from_="+100", to="+200"
    )
    assert shown.data == {"url": URL}
    presenter.close_notification(shown)


def test_sms_presenter_reraises_auth_failure(caplog):
    client = MagicMock()
    client.messages.create.side_effect = Exception("HTTP 401 error: Authenticate")
    presenter = SmsPresenter(_twilio_config(), client=client)

    with pytest.raises(Exception):
        presenter.show_notification("Title", None, {"url": URL})
    assert "Twilio authentication failed" in caplog.text


def test_email_presenter_sends_via_ses():
    ses = MagicMock()
    ses.send_email.return_value = {"MessageId": "m-1"}
    presenter = EmailPresenter(_ses_config(), ses=ses)

    presenter.show_notification("Title", "Body", {"url": URL})

    kwargs = ses.send_email.call_args.kwargs
    assert kwargs["Source"] == "bot@example.org"
    assert kwargs["Destination"] == {"ToAddresses": ["alice@example.org"]}
    assert kwargs["Message"]["Subject"]["Data"] == "Title"
    assert URL in kwargs["Message"]["Body"]["Text"]["Data"]


def test_email_presenter_reraises_client_error():
    ses = MagicMock()
    ses.send_email.side_effect = ClientError({"Error": {"Code": "MessageRejected", "Message": "no"}}, "SendEmail")

    with pytest.raises(ClientError):
        EmailPresenter(_ses_config(), ses=ses).show_notification("Title", None, {})


def test_create_presenter_defaults_to_log():
    assert isinstance(create_presenter(PresentationConfig(method="log")), LogPresenter)
