from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.errors import ConflictError
from src.domain.models.signature_token import SignatureToken, hash_token
from src.domain.value_objects.signature_status import SignatureStatus
from src.infrastructure.db.orm.contract_signature import ContractSignatureORM


class SignatureTokensSQLAlchemyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: ContractSignatureORM) -> SignatureToken:
        return SignatureToken(
            id=orm.id,
            contract_id=orm.contract_id,
            token_hash=orm.token_hash,
            issued_at=orm.issued_at,
            expires_at=orm.expires_at,
            status=orm.status,
            validation_attempts=orm.validation_attempts,
            customer_email=orm.customer_email,
            signed_at=orm.signed_at,
            signed_ip=orm.signed_ip,
        )

    async def add(self, token: SignatureToken) -> SignatureToken:
        orm = ContractSignatureORM(
            id=token.id,
            contract_id=token.contract_id,
            token_hash=token.token_hash,
            status=token.status,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            validation_attempts=token.validation_attempts,
            customer_email=token.customer_email,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Token already exists") from exc
        return token

    async def get_by_token(self, token_value: str) -> SignatureToken | None:
        stmt = (
            select(ContractSignatureORM)
            .where(ContractSignatureORM.token_hash == hash_token(token_value))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def get_latest_for_contract(self, contract_id: int) -> SignatureToken | None:
        stmt = (
            select(ContractSignatureORM)
            .where(ContractSignatureORM.contract_id == contract_id)
            .order_by(ContractSignatureORM.issued_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def invalidate_pending_for_contract(self, contract_id: int) -> int:
        stmt = (
            update(ContractSignatureORM)
            .where(
                ContractSignatureORM.contract_id == contract_id,
                ContractSignatureORM.status == SignatureStatus.PENDING,
            )
            .values(status=SignatureStatus.INVALIDATED)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def reserve_attempt(self, token_id: UUID, *, max_attempts: int) -> int | None:
        # Same compare-and-set shape as consume: the bound lives in the WHERE clause
        stmt = (
            update(ContractSignatureORM)
            .where(
                ContractSignatureORM.id == token_id,
                ContractSignatureORM.status == SignatureStatus.PENDING,
                ContractSignatureORM.validation_attempts < max_attempts,
            )
            .values(validation_attempts=ContractSignatureORM.validation_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        attempts = await self.session.execute(
            select(ContractSignatureORM.validation_attempts).where(
                ContractSignatureORM.id == token_id
            )
        )
        return attempts.scalar_one()

    async def consume(self, token_id: UUID, *, now: datetime, signed_ip: str | None) -> bool:
        # Single conditional UPDATE; the row-level write lock makes this a compare-and-set
        stmt = (
            update(ContractSignatureORM)
            .where(
                ContractSignatureORM.id == token_id,
                ContractSignatureORM.status == SignatureStatus.PENDING,
                ContractSignatureORM.expires_at >= now,
            )
            .values(status=SignatureStatus.SIGNED, signed_at=now, signed_ip=signed_ip)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
