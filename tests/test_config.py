# tests/test_config.py
import logging

from app.core import config
from app.schemas.notification import DispatchResult
from app.services.smtp_settings import decrypt_secret, encrypt_secret


def test_malformed_int_falls_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("APP_SCHEDULER_HOUR", "nine")
    monkeypatch.setenv("SMTP_PORT", "465")

    with caplog.at_level(logging.WARNING, logger="app.config"):
        assert config.scheduler_time()[0] == 9
        assert config.smtp_port() == 465

    assert "APP_SCHEDULER_HOUR='nine' is not an integer" in caplog.text
    assert "SMTP_PORT" not in caplog.text


def test_built_in_smtp_secret_is_flagged(monkeypatch, caplog):
    monkeypatch.delenv("SMTP_SECRET_KEY", raising=False)
    monkeypatch.delenv("APP_SECRET", raising=False)
    assert config.smtp_secret_configured() is False
    assert config.smtp_secret() == config.DEFAULT_SMTP_SECRET

    with caplog.at_level(logging.WARNING, logger="app.mailer"):
        token = encrypt_secret("app-pass-123")

    assert "SMTP_SECRET_KEY / APP_SECRET not set" in caplog.text
    assert decrypt_secret(token) == "app-pass-123"


def test_configured_smtp_secret_is_quiet(monkeypatch, caplog):
    monkeypatch.setenv("SMTP_SECRET_KEY", "a-real-deployment-secret")
    assert config.smtp_secret_configured() is True

    with caplog.at_level(logging.WARNING, logger="app.mailer"):
        token = encrypt_secret("app-pass-123")

    assert caplog.text == ""
    assert decrypt_secret(token) == "app-pass-123"


def test_dispatch_code_documents_store_unavailable():
    description = DispatchResult.model_fields["code"].description
    assert "STORE_UNAVAILABLE" in description
    assert "503" in description
