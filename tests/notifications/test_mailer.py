from __future__ import annotations

import smtplib
from types import SimpleNamespace

from src.campus_admin.campus_admin.notifications.mailer import LoggingMailer, SmtpMailer, build_mailer


def test_no_smtp_host_means_logging_mailer():
    mailer = build_mailer(SimpleNamespace(SMTP_HOST=""))
    assert isinstance(mailer, LoggingMailer)
    assert mailer.send(recipient="a@b.test", subject="s", body="b") is True


def test_smtp_settings_are_read():
    mailer = build_mailer(SimpleNamespace(SMTP_HOST="smtp.campus.test", SMTP_PORT="2525", SMTP_USE_TLS=False))
    assert isinstance(mailer, SmtpMailer)
    assert (mailer.host, mailer.port, mailer.use_tls) == ("smtp.campus.test", 2525, False)


def test_smtp_failure_returns_false(monkeypatch):
    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "down")

    monkeypatch.setattr(smtplib, "SMTP", refuse)
    mailer = SmtpMailer(host="smtp.campus.test", port=25, sender="no-reply@campus.test")
    assert mailer.send(recipient="a@b.test", subject="s", body="b") is False
