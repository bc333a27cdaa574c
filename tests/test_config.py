import pytest

from attention_notifier.config import DEFAULT_NOTIFICATION_INTERVAL_MS, load_config

ENV_KEYS = [
    "GERRIT_ORIGIN", "CHANGE_QUERY", "CHANGE_QUERY_LIMIT", "CHANGE_QUERY_OPTIONS",
    "GERRIT_USERNAME", "GERRIT_HTTP_PASSWORD", "STATE_BACKEND", "DB_PATH",
    "DYNAMODB_TABLE_WORKER_STATE", "NOTIFICATION_METHOD", "NOTIFICATION_INTERVAL_MS",
    "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_FROM_NUMBER", "TWILIO_TO_NUMBER",
    "SES_FROM_EMAIL", "NOTIFICATION_EMAIL", "AWS_REGION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("GERRIT_ORIGIN", "https://review.example.org/")

    config = load_config()

    assert config.gerrit.origin == "https://review.example.org"
    assert config.gerrit.query == "attention:self"
    assert config.gerrit.limit == 25
    assert config.gerrit.options == "1000081"
    assert config.state.backend == "sqlite"
    assert config.state.db_path == "notifier_state.db"
    assert config.presentation.method == "log"
    assert config.notification_interval_ms == DEFAULT_NOTIFICATION_INTERVAL_MS == 300000


def test_missing_origin():
    with pytest.raises(ValueError, match="GERRIT_ORIGIN"):
        load_config()


def test_sms_requires_twilio_settings(monkeypatch):
    monkeypatch.setenv("GERRIT_ORIGIN", "https://review.example.org")
    monkeypatch.setenv("NOTIFICATION_METHOD", "sms")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")

    with pytest.raises(ValueError) as excinfo:
        load_config()

    message = str(excinfo.value)
    assert "TWILIO_AUTH_TOKEN" in message
    assert "TWILIO_FROM_NUMBER" in message
    assert "TWILIO_TO_NUMBER" in message
    assert "TWILIO_ACCOUNT_SID" not in message


def test_email_and_dynamodb(monkeypatch):
    monkeypatch.setenv("GERRIT_ORIGIN", "https://review.example.org")
    monkeypatch.setenv("NOTIFICATION_METHOD", "email")
    monkeypatch.setenv("SES_FROM_EMAIL", "bot@example.org")
    monkeypatch.setenv("NOTIFICATION_EMAIL", "alice@example.org")
    monkeypatch.setenv("STATE_BACKEND", "DynamoDB")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("NOTIFICATION_INTERVAL_MS", "60000")

    config = load_config()

    assert config.presentation.ses.to_email == "alice@example.org"
    assert config.presentation.ses.region == "eu-west-1"
    assert config.state.backend == "dynamodb"
    assert config.state.dynamodb_table == "worker_state"
    assert config.notification_interval_ms == 60000


@pytest.mark.parametrize("key,value", [("STATE_BACKEND", "redis"), ("NOTIFICATION_METHOD", "pager")])
def test_unsupported_choices(monkeypatch, key, value):
    monkeypatch.setenv("GERRIT_ORIGIN", "https://review.example.org")
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError, match="Unsupported"):
        load_config()
