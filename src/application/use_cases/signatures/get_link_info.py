from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from src.application.errors import NotFound, TokenExpired, TokenNotFound, TokenRevoked
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.value_objects.identity_document import digits_only
from src.domain.value_objects.signature_status import SignatureStatus


@dataclass(slots=True)
class SignatureLinkInfo:
    contract_id: int
    status: SignatureStatus
    is_signed: bool
    customer_name: str
    vehicle_description: str
    document_length: int
    expires_at: datetime
    remaining_attempts: int


async def execute(
    *,
    uow: UnitOfWork,
    token_value: str,
    max_attempts: int = 5,
    now: datetime | None = None,
) -> SignatureLinkInfo:
    token = await uow.signature_tokens.get_by_token(token_value)
    if token is None:
        raise TokenNotFound("Invalid or expired link")
    if token.status is SignatureStatus.INVALIDATED:
        raise TokenRevoked("This link was replaced by a newer one")
    if token.is_expired(now or datetime.now(timezone.utc)):
        raise TokenExpired("Signing link expired; request a new one")

    contract = await uow.contracts.get(token.contract_id)
    if contract is None:
        raise NotFound("Contract not found")
    return SignatureLinkInfo(
        contract_id=contract.contract_id,
        status=token.status,
        is_signed=token.consumed,
        customer_name=contract.customer_name,
        vehicle_description=contract.vehicle_description,
        document_length=len(digits_only(contract.customer_document_number)),
        expires_at=token.expires_at,
        remaining_attempts=max(max_attempts - token.validation_attempts, 0),
    )
