from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.application.errors import NotFound, ValidationError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.models.contract import ContractRecord
from src.domain.models.signature_token import SignatureToken
from src.domain.value_objects.identity_document import is_supported_document
from src.domain.value_objects.signature_status import ContractStatus

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=48)


@dataclass(slots=True)
class IssuedSignature:
    contract: ContractRecord
    token_value: str
    signing_url: str
    expires_at: datetime


async def execute(
    *,
    uow: UnitOfWork,
    contract_id: int,
    build_signing_url: Callable[[str], str],
    ttl: timedelta = DEFAULT_TTL,
    now: datetime | None = None,
) -> IssuedSignature:
    contract = await uow.contracts.get(contract_id)
    if contract is None:
        raise NotFound("Contract not found")
    if not is_supported_document(contract.customer_document_number):
        raise ValidationError("Customer CPF/CNPJ is missing or invalid")

    # a new cycle retires every link still pending for this contract
    await uow.signature_tokens.invalidate_pending_for_contract(contract_id)
    token = SignatureToken.issue(
        contract_id=contract_id,
        ttl=ttl,
        customer_email=contract.customer_email,
        now=now,
    )
    await uow.signature_tokens.add(token)
    await uow.contracts.set_status(contract_id, ContractStatus.GENERATED)
    await uow.commit()
    logger.info("Issued signature token %s for contract #%s", token.id, contract_id)
    return IssuedSignature(
        contract=contract,
        token_value=token.token_value,
        signing_url=build_signing_url(token.token_value),
        expires_at=token.expires_at,
    )
