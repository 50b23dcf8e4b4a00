import smtplib

import pytest

from app.utils.mailer import Mailer


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, from_addr, to_addrs, message):
        self.sent.append((from_addr, to_addrs, message))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def make_mailer(**overrides):
    options = dict(
        host="smtp.example.com",
        username="mailer@example.com",
        password="app-password",
        frontend_url="https://jobs.example.com/",
    )
    options.update(overrides)
    return Mailer(**options)


def test_verification_email_contains_code(fake_smtp):
    assert make_mailer().send_verification_email("dana@example.com", "482913") is True

    server = fake_smtp.instances[0]
    from_addr, to_addrs, message = server.sent[0]
    assert server.started_tls is True
    assert server.logged_in == ("mailer@example.com", "app-password")
    assert from_addr == "mailer@example.com"
    assert to_addrs == ["dana@example.com"]
    assert "482913" in message
    assert "15 minutes" in message


def test_reset_email_links_to_frontend(fake_smtp):
    make_mailer().send_password_reset_email("dana@example.com", "abc123")

    message = fake_smtp.instances[0].sent[0][2]
    assert "https://jobs.example.com/reset-password?token=abc123" in message


def test_unreachable_server_returns_false(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", refuse)

    assert make_mailer().send_verification_email("dana@example.com", "111111") is False


def test_disabled_or_closed_mailer_sends_nothing(fake_smtp):
    unconfigured = make_mailer(host=None)
    closed = make_mailer()
    closed.close()

    assert unconfigured.enabled is False
    assert unconfigured.send_verification_email("dana@example.com", "111111") is False
    assert closed.send_password_reset_email("dana@example.com", "t") is False
    assert fake_smtp.instances == []
