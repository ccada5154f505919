from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from src.application.errors import (
    AppError,
    InvalidUploadRequest,
    PayloadTooLarge,
    StorageUnavailable,
)
from src.config.settings import Settings
from src.domain.models.upload import DirectUpload, PresignedUpload, UploadPlan, UploadRequest
from src.infrastructure.storage.ports import RemoteObjectStore

logger = logging.getLogger(__name__)

DIRECT_UPLOAD_ENDPOINT = "/api/uploads/direct"


class UploadMode(str, Enum):
    PRESIGNED = "presigned"
    DIRECT = "direct"


@dataclass(slots=True, frozen=True)
class UploadConfig:
    """Deployment capability, decided once at startup."""

    remote_storage_enabled: bool
    max_upload_bytes: int = 10 * 1024 * 1024
    presign_expires_seconds: int = 900
    direct_upload_endpoint: str = DIRECT_UPLOAD_ENDPOINT

    @classmethod
    def from_settings(
        cls, settings: Settings, *, remote_available: bool | None = None
    ) -> UploadConfig:
        if remote_available is None:
            remote_available = settings.remote_storage_enabled
        return cls(
            remote_storage_enabled=remote_available,
            max_upload_bytes=settings.max_upload_bytes,
            presign_expires_seconds=settings.s3_presign_expires_seconds,
        )


class UploadNegotiator:
    def __init__(self, config: UploadConfig, remote_store: RemoteObjectStore | None = None) -> None:
        if config.remote_storage_enabled and remote_store is None:
            raise ValueError("Remote storage enabled but no remote store supplied")
        self.config = config
        self._remote_store = remote_store if config.remote_storage_enabled else None
        self.mode = UploadMode.PRESIGNED if self._remote_store is not None else UploadMode.DIRECT

    def _validate(self, request: UploadRequest) -> None:
        if not request.name or not request.name.strip():
            raise InvalidUploadRequest("Missing required field: name")
        if request.declared_size < 0:
            raise InvalidUploadRequest("Declared size must not be negative")
        if request.declared_size > self.config.max_upload_bytes:
            raise PayloadTooLarge(
                "File exceeds the maximum upload size",
                details={"max_bytes": self.config.max_upload_bytes},
            )

    async def negotiate(self, request: UploadRequest) -> UploadPlan:
        self._validate(request)
        if self.mode is UploadMode.DIRECT:
            return DirectUpload(endpoint=self.config.direct_upload_endpoint)

        content_type = request.declared_content_type or "application/octet-stream"
        try:
            write = await self._remote_store.mint_write_url(
                content_type, expires_seconds=self.config.presign_expires_seconds
            )
        except AppError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to mint upload URL")
            raise StorageUnavailable("Failed to generate upload URL") from exc
        logger.info("Issued presigned upload for %s -> %s", request.name, write.object_path)
        return PresignedUpload(
            write_url=write.write_url,
            expires_at=write.expires_at,
            object_path=write.object_path,
        )
