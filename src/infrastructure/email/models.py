from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(slots=True, frozen=True)
class EmailMessage:
    """Provider-neutral message. Rendered unaddressed; see ``addressed_to``."""

    subject: str
    to: tuple[str, ...] = ()
    text: str | None = None
    html: str | None = None
    from_email: str | None = None
    from_name: str | None = None
    bcc: tuple[str, ...] = ()

    def addressed_to(self, *recipients: str) -> EmailMessage:
        return replace(self, to=tuple(recipients))

    @property
    def envelope_recipients(self) -> list[str]:
        return [*self.to, *self.bcc]


class EmailService:
    async def send(self, message: EmailMessage) -> None:  # pragma: no cover - interface
        raise NotImplementedError
