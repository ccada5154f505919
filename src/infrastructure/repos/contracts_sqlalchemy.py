from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.errors import NotFound
from src.domain.models.contract import ContractRecord
from src.domain.value_objects.signature_status import ContractStatus
from src.infrastructure.db.orm.contract import ContractORM


class ContractsSQLAlchemyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: ContractORM) -> ContractRecord:
        return ContractRecord(
            contract_id=orm.id,
            customer_name=orm.customer_name,
            customer_document_number=orm.customer_document,
            vehicle_description=orm.vehicle_description,
            customer_email=orm.customer_email,
            status=orm.status,
        )

    async def get(self, contract_id: int) -> ContractRecord | None:
        stmt = select(ContractORM).where(ContractORM.id == contract_id)
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def set_status(self, contract_id: int, status: ContractStatus) -> None:
        stmt = update(ContractORM).where(ContractORM.id == contract_id).values(status=status)
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFound("Contract not found")
