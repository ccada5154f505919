from __future__ import annotations

from dataclasses import dataclass

from src.domain.value_objects.signature_status import ContractStatus


@dataclass(slots=True)
class ContractRecord:
    """Read model of a contract as seen by the signature flow."""

    contract_id: int
    customer_name: str
    customer_document_number: str
    vehicle_description: str
    customer_email: str | None = None
    status: ContractStatus = ContractStatus.DRAFT
