from __future__ import annotations

import pytest

from src.config.settings import Settings
from src.infrastructure.email.factory import create_email_service
from src.infrastructure.email.models import EmailMessage
from src.infrastructure.email.providers.logging_provider import LoggingEmailService
from src.infrastructure.email.providers.smtp_provider import SMTPEmailService, _build_mime
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer


def make_settings(**overrides) -> Settings:
    data = {"database_url": "sqlite+aiosqlite:///unused.db", "jwt_secret_key": "secret"}
    data.update(overrides)
    return Settings.model_validate(data)


def render(settings: Settings, **context):
    ctx = {
        "contract_id": 42,
        "customer_name": "Maria Souza",
        "vehicle_description": "Toyota Corolla 2021",
        "signing_url": "https://loja.test/assinar/abc123",
        "expires_at": "04/03/2026 14:00 UTC",
    }
    ctx.update(context)
    return EmailTemplateRenderer.create_default().render(
        template_key="contract_signature", settings=settings, context=ctx
    )


def test_signature_email_carries_the_link():
    message = render(make_settings())

    assert message.subject == "Contrato #42 - Assinatura Digital"
    assert "https://loja.test/assinar/abc123" in message.text
    assert 'href="https://loja.test/assinar/abc123"' in message.html
    assert "MayBack Cars" in message.html
    assert message.from_email == "no-reply@mayback.local"
    assert list(message.to) == []


def test_unknown_locale_falls_back_to_portuguese():
    message = render(make_settings(email_default_locale="en"))

    assert message.subject == "Contrato #42 - Assinatura Digital"


def test_html_body_escapes_customer_data():
    message = render(make_settings(), customer_name="<script>x</script>")

    assert "<script>x</script>" not in message.html
    assert "&lt;script&gt;" in message.html
    assert "<script>x</script>" in message.text


def test_addressed_to_returns_a_copy():
    message = EmailMessage(subject="s", to=())
    addressed = message.addressed_to("maria@example.com")

    assert list(addressed.to) == ["maria@example.com"]
    assert list(message.to) == []


def test_mime_message_has_both_parts():
    mime = _build_mime(
        EmailMessage(
            subject="Contrato",
            to=("maria@example.com",),
            text="texto",
            html="<p>html</p>",
            from_email="no-reply@mayback.local",
            from_name="MayBack Cars",
        )
    )

    assert mime["To"] == "maria@example.com"
    assert mime["From"] == "MayBack Cars <no-reply@mayback.local>"
    assert [part.get_content_type() for part in mime.get_payload()] == [
        "text/plain",
        "text/html",
    ]


async def test_logging_provider_records_messages():
    service = LoggingEmailService()
    await service.send(EmailMessage(subject="s", to=("a@example.com",), text="link"))

    assert len(service.sent) == 1


def test_factory_builds_configured_provider():
    assert isinstance(create_email_service(make_settings()), LoggingEmailService)
    smtp = create_email_service(
        make_settings(email_provider="smtp", smtp_host="smtp.test", smtp_port=465)
    )
    assert isinstance(smtp, SMTPEmailService)
    assert smtp.use_ssl is True
    assert smtp.use_tls is False


@pytest.mark.parametrize("overrides", [{"email_provider": "smtp"}, {"email_provider": "ses"}])
def test_factory_rejects_incomplete_or_unknown_provider(overrides):
    with pytest.raises(ValueError):
        create_email_service(make_settings(**overrides))
