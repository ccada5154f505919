from __future__ import annotations

import logging
from datetime import datetime, timezone

from src.application.errors import (
    IdentityMismatch,
    NotFound,
    TokenAlreadyConsumed,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
    TooManyAttempts,
)
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.value_objects.identity_document import fragment_matches
from src.domain.value_objects.signature_status import ContractStatus, SignatureStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


async def _raise_for_unreservable(uow: UnitOfWork, token_value: str) -> None:
    current = await uow.signature_tokens.get_by_token(token_value)
    if current is None:
        raise TokenNotFound("Invalid signing link")
    if current.status is SignatureStatus.INVALIDATED:
        raise TokenRevoked("This link was replaced by a newer one")
    if current.consumed:
        raise TokenAlreadyConsumed("Contract already signed")
    raise TooManyAttempts("Too many attempts; link locked")


async def execute(
    *,
    uow: UnitOfWork,
    token_value: str,
    identity_fragment: str,
    signer_ip: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    now: datetime | None = None,
) -> int:
    """Check the signer's identity fragment and mark the contract signed.

    Returns the contract id. The final transition is a conditional update on
    the token row, so of several concurrent valid presentations exactly one
    wins and the rest get ``TokenAlreadyConsumed``.
    """
    now = now or datetime.now(timezone.utc)
    token = await uow.signature_tokens.get_by_token(token_value)
    if token is None:
        raise TokenNotFound("Invalid signing link")
    if token.status is SignatureStatus.INVALIDATED:
        raise TokenRevoked("This link was replaced by a newer one")
    if token.is_expired(now):
        raise TokenExpired("Signing link expired; request a new one")
    if token.consumed:
        raise TokenAlreadyConsumed("Contract already signed")
    if token.validation_attempts >= max_attempts:
        raise TooManyAttempts("Too many attempts; link locked")

    contract = await uow.contracts.get(token.contract_id)
    if contract is None:
        raise NotFound("Contract not found")

    # Every presentation reserves an attempt before its fragment is compared;
    # the limit is enforced by the reservation, not by the read above.
    attempts = await uow.signature_tokens.reserve_attempt(token.id, max_attempts=max_attempts)
    if attempts is None:
        await uow.rollback()
        await _raise_for_unreservable(uow, token_value)

    if not fragment_matches(contract.customer_document_number, identity_fragment):
        await uow.commit()
        remaining = max(max_attempts - attempts, 0)
        logger.info(
            "Identity check failed for signature %s (%d attempts)", token.id, attempts
        )
        raise IdentityMismatch(
            f"Invalid code. {remaining} attempts remaining.",
            details={"remaining": remaining},
        )

    if not await uow.signature_tokens.consume(token.id, now=now, signed_ip=signer_ip):
        await uow.rollback()
        raise TokenAlreadyConsumed("Contract already signed")
    await uow.contracts.set_status(token.contract_id, ContractStatus.SIGNED)
    await uow.commit()
    logger.info("Contract #%s signed via signature %s", token.contract_id, token.id)
    return token.contract_id
