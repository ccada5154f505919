from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from src.application.errors import InvalidUploadRequest, NotFound, PayloadTooLarge
from src.config.settings import Settings
from src.domain.models.upload import DirectUpload, UploadRequest
from src.infrastructure.services.upload_negotiator import UploadNegotiator
from src.infrastructure.storage.local import LocalFileStore
from src.interfaces.http.deps import get_app_settings, get_local_store, get_negotiator
from src.interfaces.http.schemas.uploads import (
    DirectUploadResponse,
    PresignedUploadResponse,
    StoredFileResponse,
    UploadMetadata,
    UploadUrlRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])

FILE_CACHE_CONTROL = "public, max-age=31536000"


@router.post(
    "/uploads/request-url",
    response_model=PresignedUploadResponse | DirectUploadResponse,
)
async def request_upload_url(
    payload: UploadUrlRequest,
    negotiator: UploadNegotiator = Depends(get_negotiator),
) -> PresignedUploadResponse | DirectUploadResponse:
    """Tell the client how to upload this file: presigned PUT or direct multipart POST."""
    upload_request = UploadRequest(
        name=(payload.name or "").strip(),
        declared_size=payload.size,
        declared_content_type=payload.content_type,
    )
    plan = await negotiator.negotiate(upload_request)
    metadata = UploadMetadata(
        name=upload_request.name, size=payload.size, content_type=payload.content_type
    )
    if isinstance(plan, DirectUpload):
        return DirectUploadResponse(direct_upload_url=plan.endpoint, metadata=metadata)
    return PresignedUploadResponse(
        upload_url=plan.write_url,
        object_path=plan.object_path,
        expires_at=plan.expires_at,
        metadata=metadata,
    )


@router.post("/uploads/direct", response_model=StoredFileResponse)
async def direct_upload(
    file: UploadFile | None = File(default=None),
    store: LocalFileStore = Depends(get_local_store),
    settings: Settings = Depends(get_app_settings),
) -> StoredFileResponse:
    if file is None:
        raise InvalidUploadRequest("No file uploaded")
    # read one byte past the ceiling to detect oversize without buffering it all
    data = await file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLarge(
            "File exceeds the maximum upload size",
            details={"max_bytes": settings.max_upload_bytes},
        )
    stored = await store.save(
        data,
        file.filename or "",
        file.content_type or "application/octet-stream",
    )
    url = store.public_path(stored.file_name)
    return StoredFileResponse(object_path=url, file_name=stored.file_name, url=url)


@router.get("/files/{file_name}")
async def get_file(
    file_name: str,
    store: LocalFileStore = Depends(get_local_store),
) -> FileResponse:
    found = await store.locate(file_name)
    if found is None:
        raise NotFound("File not found")
    return FileResponse(
        found.path,
        media_type=found.content_type,
        headers={"Cache-Control": FILE_CACHE_CONTROL},
    )
