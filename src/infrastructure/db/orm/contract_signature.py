from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.value_objects.signature_status import SignatureStatus
from src.infrastructure.db.base import Base


class ContractSignatureORM(Base):
    __tablename__ = "contract_signatures"
    __table_args__ = (
        Index("ix_contract_signatures_token_hash", "token_hash", unique=True),
        Index("ix_contract_signatures_contract_id", "contract_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    contract_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[SignatureStatus] = mapped_column(
        Enum(SignatureStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SignatureStatus.PENDING,
    )
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    validation_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    signed_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
