from __future__ import annotations

import logging

from src.infrastructure.email.models import EmailMessage, EmailService

logger = logging.getLogger(__name__)


class LoggingEmailService(EmailService):
    """Development provider: records that a message would be sent, never its body."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.sent.append(message)
        # bodies carry signing links, so only sizes are logged
        logger.info(
            "Email not delivered (logging provider): subject=%s to=%s text_len=%s html_len=%s",
            message.subject,
            ",".join(message.to),
            len(message.text or ""),
            len(message.html or ""),
        )
