from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union
from uuid import uuid4


@dataclass(slots=True, frozen=True)
class UploadRequest:
    """Client-declared file metadata. Size and type are advisory."""

    name: str
    declared_size: int = 0
    declared_content_type: str = "application/octet-stream"


@dataclass(slots=True, frozen=True)
class DirectUpload:
    """Multipart POST of the raw bytes to the application server."""

    endpoint: str
    plan_id: str = field(default_factory=lambda: uuid4().hex)


@dataclass(slots=True, frozen=True)
class PresignedUpload:
    """PUT of the raw bytes to object storage; ``object_path`` is the public reference."""

    write_url: str
    expires_at: datetime
    object_path: str
    plan_id: str = field(default_factory=lambda: uuid4().hex)


UploadPlan = Union[DirectUpload, PresignedUpload]


@dataclass(slots=True, frozen=True)
class StoredObject:
    file_name: str
    content_type: str
    size_bytes: int
