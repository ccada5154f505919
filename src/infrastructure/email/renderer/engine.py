from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound, select_autoescape

from src.config.settings import Settings
from src.infrastructure.email.models import EmailMessage

FALLBACK_LOCALE = "pt"
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class EmailTemplateRenderer:
    """
    Renders ``<locale>/<template_key>/{subject.txt,body.txt,body.html}.j2``.

    A locale without its own copy of a template falls back to Portuguese.
    HTML bodies are wrapped in ``<locale>/_layout.html.j2`` when present.
    """

    def __init__(self, base_path: Path = TEMPLATES_DIR) -> None:
        self.base_path = base_path
        self.env = Environment(
            loader=FileSystemLoader(str(base_path)),
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
        )

    @classmethod
    def create_default(cls) -> EmailTemplateRenderer:
        return cls()

    def _candidates(self, locale: str, name: str) -> list[str]:
        names = [f"{locale}/{name}"]
        if locale != FALLBACK_LOCALE:
            names.append(f"{FALLBACK_LOCALE}/{name}")
        return names

    def _template(self, locale: str, name: str, *, required: bool = True) -> Template | None:
        try:
            return self.env.select_template(self._candidates(locale, name))
        except TemplateNotFound:
            if required:
                raise
            return None

    def render(
        self,
        *,
        template_key: str,
        settings: Settings,
        context: dict[str, Any],
        locale: str | None = None,
    ) -> EmailMessage:
        """Build an unaddressed message; callers add recipients with ``addressed_to``."""
        loc = (locale or settings.email_default_locale or FALLBACK_LOCALE).lower()
        ctx = {
            "app": {
                "name": settings.email_from_name,
                "primary_color": settings.email_primary_color,
            },
            **context,
        }

        subject = self._template(loc, f"{template_key}/subject.txt.j2").render(ctx).strip()
        text = self._template(loc, f"{template_key}/body.txt.j2").render(ctx).strip()

        html = None
        body_html = self._template(loc, f"{template_key}/body.html.j2", required=False)
        if body_html is not None:
            html = body_html.render(ctx)
            layout = self._template(loc, "_layout.html.j2", required=False)
            if layout is not None:
                html = layout.render({**ctx, "content": html})

        return EmailMessage(
            subject=subject,
            text=text,
            html=html,
            from_email=settings.email_from_address,
            from_name=settings.email_from_name,
        )
