from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import unquote, urlsplit
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.application.errors import ObjectNotFound, StorageUnavailable
from src.infrastructure.storage.ports import (
    OBJECTS_PREFIX,
    ObjectStream,
    PresignedWrite,
    RemoteObjectStore,
)

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}
_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class S3ObjectStore(RemoteObjectStore):
    bucket: str
    region: str | None = None
    prefix: str = ""
    endpoint_url: str | None = None
    upload_dir: str = "uploads"
    _s3: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._s3 = boto3.client("s3", region_name=self.region, endpoint_url=self.endpoint_url)

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}{key}" if self.prefix else key

    async def mint_write_url(self, content_type: str, *, expires_seconds: int) -> PresignedWrite:
        key = self._full_key(f"{self.upload_dir}/{uuid4()}")
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_seconds)
        try:
            url = await asyncio.to_thread(
                self._s3.generate_presigned_url,
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Could not presign upload for bucket %s: %s", self.bucket, exc)
            raise StorageUnavailable("Object storage is unavailable") from exc
        return PresignedWrite(
            write_url=url,
            object_path=self.normalize_object_path(url),
            expires_at=expires_at,
        )

    def normalize_object_path(self, url: str) -> str:
        """Map a storage URL to its public /objects/... path; foreign URLs pass through."""
        parts = urlsplit(url)
        if not parts.scheme:
            return url
        segments = [unquote(s) for s in parts.path.split("/") if s]
        # path-style URLs carry the bucket as the first segment
        if segments and segments[0] == self.bucket and not parts.netloc.startswith(
            f"{self.bucket}."
        ):
            segments = segments[1:]
        key = "/".join(segments)
        if self.prefix:
            if not key.startswith(self.prefix):
                return url
            key = key[len(self.prefix) :]
        if not key.startswith(f"{self.upload_dir}/"):
            return url
        return f"{OBJECTS_PREFIX}{key}"

    def _key_for(self, object_path: str) -> str:
        if not object_path.startswith(OBJECTS_PREFIX):
            raise ObjectNotFound("Object not found")
        relative = object_path[len(OBJECTS_PREFIX) :]
        if not relative or ".." in relative.split("/"):
            raise ObjectNotFound("Object not found")
        return self._full_key(relative)

    async def open_object(self, object_path: str) -> ObjectStream:
        key = self._key_for(object_path)
        try:
            response = await asyncio.to_thread(self._s3.get_object, Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_CODES:
                raise ObjectNotFound("Object not found") from exc
            logger.error("Object storage read failed for %s: %s", key, exc)
            raise StorageUnavailable("Object storage is unavailable") from exc
        except BotoCoreError as exc:
            logger.error("Object storage read failed for %s: %s", key, exc)
            raise StorageUnavailable("Object storage is unavailable") from exc

        body = response["Body"]

        async def _chunks() -> AsyncIterator[bytes]:
            try:
                while True:
                    chunk = await asyncio.to_thread(body.read, _CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
            finally:
                body.close()

        return ObjectStream(
            chunks=_chunks(),
            content_type=response.get("ContentType") or "application/octet-stream",
            size_bytes=response.get("ContentLength"),
        )
