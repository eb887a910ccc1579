import pytest

from postop_server.config import ServerSettings
from postop_triage.engine import TriageEngine
from postop_triage.keywords import KeywordTable

SECRET = "s3cret-token"


@pytest.fixture(scope="session")
def keyword_table():
    """Bundled keyword table, loaded once for the whole test session."""
    return KeywordTable().load()


@pytest.fixture
def engine(keyword_table):
    return TriageEngine(keyword_table)


@pytest.fixture
def settings():
    """Settings with both alert channels and a dashboard configured."""
    return ServerSettings(
        secret_token=SECRET,
        telegram_bot_token="BOT123",
        telegram_chat_id="-100200",
        telegram_api_base="https://bot.test",
        sendgrid_api_key="SG.key",
        email_from="noreply@clinic.test",
        alert_email="oncall@clinic.test",
        sendgrid_api_url="https://mail.test/v3/mail/send",
        dashboard_url="https://dash.clinic.test/",
        alert_timeout_seconds=2.0,
        shutdown_grace_seconds=5.0,
    )
