from __future__ import annotations

from typing import Protocol

from src.application.interfaces.repositories.contracts import ContractsRepository
from src.application.interfaces.repositories.signature_tokens import SignatureTokensRepository


class UnitOfWork(Protocol):
    contracts: ContractsRepository
    signature_tokens: SignatureTokensRepository

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
