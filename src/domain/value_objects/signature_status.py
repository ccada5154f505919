from __future__ import annotations

from enum import Enum


class SignatureStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"
    INVALIDATED = "invalidated"


class ContractStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    SIGNED = "signed"
    CANCELLED = "cancelled"
