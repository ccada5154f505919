from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from src.application.errors import ObjectNotFound
from src.infrastructure.storage.ports import OBJECTS_PREFIX, RemoteObjectStore
from src.interfaces.http.deps import get_remote_store

router = APIRouter(tags=["uploads"])

OBJECT_CACHE_CONTROL = "private, max-age=3600"


@router.get("/objects/{object_path:path}")
async def get_object(
    object_path: str,
    store: RemoteObjectStore | None = Depends(get_remote_store),
) -> StreamingResponse:
    if store is None:
        raise ObjectNotFound("Object not found")
    stream = await store.open_object(f"{OBJECTS_PREFIX}{object_path}")
    headers = {"Cache-Control": OBJECT_CACHE_CONTROL}
    if stream.size_bytes is not None:
        headers["Content-Length"] = str(stream.size_bytes)
    return StreamingResponse(stream.chunks, media_type=stream.content_type, headers=headers)
