# app/services/mailer.py
from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Protocol

from sqlalchemy.orm import Session

from app.core.config import mail_from_name, mail_send_timeout, smtp_host, smtp_port
from app.services.smtp_settings import get_smtp_credentials

log = logging.getLogger("app.mailer")


class MailTransportNotConfigured(RuntimeError):
    """No sender credentials available (distinct from a delivery failure)."""


class MailTransport(Protocol):
    sender: str

    def send(self, *, to: str, subject: str, body: str) -> None:
        ...


class SmtpTransport:
    """
    Plain-text mail over SMTP_SSL. One connection per message; every
    network step is bounded by `timeout` seconds and a timeout raises.
    """

    def __init__(
        self,
        sender: str,
        password: str,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        timeout: Optional[int] = None,
        from_name: Optional[str] = None,
    ):
        self.sender = sender
        self._password = password
        self.host = host or smtp_host()
        self.port = port or smtp_port()
        self.timeout = timeout or mail_send_timeout()
        self.from_name = from_name or mail_from_name()

    def _message(self, to: str, subject: str, body: str) -> EmailMessage:
        em = EmailMessage()
        em["From"] = f'"{self.from_name}" <{self.sender}>'
        em["To"] = to
        em["Subject"] = subject
        em.set_content(body)
        return em

    def send(self, *, to: str, subject: str, body: str) -> None:
        if not to or not to.strip():
            raise ValueError("Recipient email address is required.")
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as smtp:
            smtp.login(self.sender, self._password)
            smtp.send_message(self._message(to, subject, body))
        log.debug("mail sent to=%s subject=%r", to, subject)


def get_transport(db: Session) -> SmtpTransport:
    """Build the transport from stored/env credentials or raise MailTransportNotConfigured."""
    sender, password = get_smtp_credentials(db)
    if not sender or not password:
        raise MailTransportNotConfigured("MAIL_USER/MAIL_PASS not set")
    return SmtpTransport(sender, password)


def error_message(exc: BaseException, fallback: str = "Mail send failed") -> str:
    """Best human-readable detail from an smtplib / socket error."""
    if isinstance(exc, smtplib.SMTPResponseException):
        detail = exc.smtp_error
        if isinstance(detail, bytes):
            detail = detail.decode("utf-8", "replace")
        return f"{exc.smtp_code} {detail}".strip()
    if isinstance(exc, TimeoutError):
        return f"Mail send timed out: {exc}" if str(exc) else "Mail send timed out"
    return str(exc) or fallback
