from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.models.signature_token import SignatureToken


class SignatureTokensRepository(Protocol):
    async def add(self, token: SignatureToken) -> SignatureToken: ...

    async def get_by_token(self, token_value: str) -> SignatureToken | None: ...

    async def get_latest_for_contract(self, contract_id: int) -> SignatureToken | None: ...

    async def invalidate_pending_for_contract(self, contract_id: int) -> int: ...

    async def reserve_attempt(self, token_id: UUID, *, max_attempts: int) -> int | None:
        """Count one identity check against a pending token. None once none are left."""
        ...

    async def consume(self, token_id: UUID, *, now: datetime, signed_ip: str | None) -> bool:
        """Flip a pending, unexpired token to signed. True only for the single winner."""
        ...
