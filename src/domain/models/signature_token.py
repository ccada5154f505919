from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from src.domain.value_objects.signature_status import SignatureStatus

TOKEN_BYTES = 32


def hash_token(token_value: str) -> str:
    return hashlib.sha256(token_value.encode("utf-8")).hexdigest()


def generate_token_value() -> str:
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(slots=True)
class SignatureToken:
    """
    Signing-link token bound to one contract.
    Only the SHA-256 of the token value is stored; the plaintext is handed
    back once, at issuance, to be embedded in the signing link.
    """

    id: UUID
    contract_id: int
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    status: SignatureStatus = SignatureStatus.PENDING
    validation_attempts: int = 0
    customer_email: str | None = None
    signed_at: datetime | None = None
    signed_ip: str | None = None
    token_value: str | None = field(default=None, repr=False, compare=False)

    @classmethod
    def issue(
        cls,
        *,
        contract_id: int,
        ttl: timedelta,
        customer_email: str | None = None,
        now: datetime | None = None,
    ) -> SignatureToken:
        issued_at = now or datetime.now(timezone.utc)
        value = generate_token_value()
        return cls(
            id=uuid4(),
            contract_id=contract_id,
            token_hash=hash_token(value),
            issued_at=issued_at,
            expires_at=issued_at + ttl,
            customer_email=customer_email,
            token_value=value,
        )

    @property
    def consumed(self) -> bool:
        return self.status is SignatureStatus.SIGNED

    def is_expired(self, now: datetime | None = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return current > _aware(self.expires_at)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
