from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from src.infrastructure.email.models import EmailMessage, EmailService

logger = logging.getLogger(__name__)


def _build_mime(message: EmailMessage) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = message.subject
    if message.from_email:
        msg["From"] = formataddr((message.from_name or "", message.from_email))
    msg["To"] = ", ".join(message.to)
    if message.text:
        msg.attach(MIMEText(message.text, "plain", "utf-8"))
    if message.html:
        msg.attach(MIMEText(message.html, "html", "utf-8"))
    return msg


@dataclass(slots=True)
class SMTPEmailService(EmailService):
    host: str
    port: int = 587
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    use_tls: bool = True
    use_ssl: bool = False
    timeout: float = 30.0

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            context = ssl.create_default_context()
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.ehlo()
        if self.use_tls:
            server.starttls(context=ssl.create_default_context())
            server.ehlo()
        return server

    async def send(self, message: EmailMessage) -> None:
        mime = _build_mime(message)
        recipients = message.envelope_recipients

        def _send_sync() -> None:
            with self._connect() as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(message.from_email or "", recipients, mime.as_string())

        await asyncio.to_thread(_send_sync)
        logger.info(
            "Email sent via SMTP: subject=%s recipients=%d", message.subject, len(recipients)
        )
