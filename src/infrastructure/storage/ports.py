from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

OBJECTS_PREFIX = "/objects/"


@dataclass(slots=True, frozen=True)
class PresignedWrite:
    write_url: str
    object_path: str
    expires_at: datetime


@dataclass(slots=True)
class ObjectStream:
    chunks: AsyncIterator[bytes]
    content_type: str
    size_bytes: int | None = None


class RemoteObjectStore(Protocol):
    async def mint_write_url(
        self, content_type: str, *, expires_seconds: int
    ) -> PresignedWrite: ...

    def normalize_object_path(self, url: str) -> str: ...

    async def open_object(self, object_path: str) -> ObjectStream: ...
