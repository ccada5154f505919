from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.domain.value_objects.signature_status import SignatureStatus
from src.interfaces.http.schemas.common import CamelModel


class SignatureRequestResponse(CamelModel):
    message: str
    email_sent: bool
    signing_url: str
    expires_at: datetime


class SignatureStatusResponse(CamelModel):
    has_signature: bool
    status: SignatureStatus | None = None
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    signed_at: datetime | None = None


class SignatureLinkInfoResponse(CamelModel):
    contract_id: int
    status: SignatureStatus
    is_signed: bool
    customer_name: str
    vehicle_info: str
    cpf_cnpj_length: int
    expires_at: datetime
    remaining_attempts: int


class SignRequest(CamelModel):
    code: str = Field(min_length=1, max_length=16, examples=["123"])


class SignResponse(CamelModel):
    message: str
    signed: bool
    contract_id: int
