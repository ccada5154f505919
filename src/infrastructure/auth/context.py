from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(slots=True)
class AuthContext:
    user_id: UUID
    claims: dict[str, Any]
