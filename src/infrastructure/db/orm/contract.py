from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.value_objects.signature_status import ContractStatus
from src.infrastructure.db.base import Base


class ContractORM(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_document: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vehicle_description: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ContractStatus.DRAFT,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
