"""
Outbound e-mail delivery.

Mailer is the seam the rest of the code depends on: anything with an async
send(subject, body, recipients) works. SmtpMailer is the production
implementation on top of smtplib; the blocking SMTP conversation runs in a
worker thread so the event loop keeps serving requests.

Every recipient gets an individual message with only their own address in
the To: header.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Protocol, Sequence
import asyncio
import logging
import smtplib

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(self, subject: str, body: str, recipients: Sequence[str]) -> None:
        ...


@dataclass
class SmtpSettings:
    host: str = "localhost"
    port: int = 25
    username: str | None = None
    password: str | None = None
    starttls: bool = False
    sender: str = "library@localhost"
    timeout: float = 30.0


@dataclass
class SmtpMailer:
    """Send plain-text mail through an SMTP relay."""
    settings: SmtpSettings = field(default_factory=SmtpSettings)

    def build_message(self, subject: str, body: str, recipient: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _send_blocking(self, subject: str, body: str, recipients: Sequence[str]) -> None:
        s = self.settings
        with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
            if s.starttls:
                smtp.starttls()
            if s.username:
                smtp.login(s.username, s.password or "")
            for recipient in recipients:
                smtp.send_message(self.build_message(subject, body, recipient))

    async def send(self, subject: str, body: str, recipients: Sequence[str]) -> None:
        if not recipients:
            return
        await asyncio.to_thread(self._send_blocking, subject, body, list(recipients))
        logger.info("Sent %r to %d recipient(s) via %s", subject, len(recipients), self.settings.host)
