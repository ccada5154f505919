from __future__ import annotations

from src.application.errors import NotFound
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.models.signature_token import SignatureToken


async def execute(*, uow: UnitOfWork, contract_id: int) -> SignatureToken | None:
    contract = await uow.contracts.get(contract_id)
    if contract is None:
        raise NotFound("Contract not found")
    return await uow.signature_tokens.get_latest_for_contract(contract_id)
