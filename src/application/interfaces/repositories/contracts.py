from __future__ import annotations

from typing import Protocol

from src.domain.models.contract import ContractRecord
from src.domain.value_objects.signature_status import ContractStatus


class ContractsRepository(Protocol):
    async def get(self, contract_id: int) -> ContractRecord | None: ...

    async def set_status(self, contract_id: int, status: ContractStatus) -> None: ...
