"""Tests for outgoing email."""

import logging
import smtplib

import pytest

from natours.config import settings
from natours.core.email import EmailError, send_email


class FakeSMTP:
    """Records what would have been sent."""

    sent: list = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.logged_in = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, message):
        FakeSMTP.sent.append(message)


def test_send_email_without_host_logs(monkeypatch, caplog):
    """Test that the email is logged when no SMTP host is configured."""
    monkeypatch.setattr(settings, "email_host", None)

    with caplog.at_level(logging.INFO, logger="natours.core.email"):
        send_email("jonas@example.com", "Hello", "Body text")

    assert "jonas@example.com" in caplog.text
    assert "Hello" in caplog.text


def test_send_email_over_smtp(monkeypatch):
    monkeypatch.setattr(settings, "email_host", "smtp.example.com")
    monkeypatch.setattr(settings, "email_username", "mailer")
    monkeypatch.setattr(settings, "email_password", "secret")
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    FakeSMTP.sent = []

    send_email("jonas@example.com", "Reset", "Your token")

    assert len(FakeSMTP.sent) == 1
    message = FakeSMTP.sent[0]
    assert message["To"] == "jonas@example.com"
    assert message["Subject"] == "Reset"
    assert message["From"] == settings.email_from
    assert message.get_content().strip() == "Your token"


def test_send_email_failure(monkeypatch):
    """Test that SMTP failures surface as EmailError."""

    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(settings, "email_host", "smtp.example.com")
    monkeypatch.setattr(smtplib, "SMTP", refuse)

    with pytest.raises(EmailError):
        send_email("jonas@example.com", "Reset", "Your token")
