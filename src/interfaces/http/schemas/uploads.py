from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from src.interfaces.http.schemas.common import CamelModel


class UploadUrlRequest(CamelModel):
    # optional here so a missing name is a 400 from the negotiator, not a 422
    name: str | None = Field(default=None, examples=["photo.jpg"])
    size: int = 0
    content_type: str = Field(default="application/octet-stream", examples=["image/jpeg"])


class UploadMetadata(CamelModel):
    name: str
    size: int
    content_type: str


class PresignedUploadResponse(CamelModel):
    upload_url: str = Field(alias="uploadURL")
    object_path: str
    expires_at: datetime
    use_direct_upload: Literal[False] = False
    metadata: UploadMetadata


class DirectUploadResponse(CamelModel):
    use_direct_upload: Literal[True] = True
    direct_upload_url: str
    metadata: UploadMetadata


class StoredFileResponse(CamelModel):
    object_path: str
    file_name: str
    url: str
