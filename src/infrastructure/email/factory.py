from __future__ import annotations

from src.config.settings import Settings
from src.infrastructure.email.models import EmailService
from src.infrastructure.email.providers.logging_provider import LoggingEmailService


def create_email_service(settings: Settings) -> EmailService:
    provider = (settings.email_provider or "logging").lower()
    if provider == "smtp":
        if not settings.smtp_host:
            raise ValueError("EMAIL_PROVIDER=smtp requires SMTP_HOST")
        from src.infrastructure.email.providers.smtp_provider import SMTPEmailService

        return SMTPEmailService(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            use_tls=settings.smtp_use_tls and settings.smtp_port != 465,
            use_ssl=settings.smtp_port == 465,
        )
    if provider != "logging":
        raise ValueError(f"Unsupported email provider: {provider}")
    return LoggingEmailService()
