from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from src.application.errors import (
    InvalidUploadRequest,
    PayloadTooLarge,
    StorageUnavailable,
    UploadRejected,
)
from src.domain.models.upload import DirectUpload, PresignedUpload, UploadPlan

logger = logging.getLogger(__name__)

REQUEST_URL_PATH = "/api/uploads/request-url"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _parse_instant(value: Any) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def plan_from_payload(payload: dict[str, Any]) -> UploadPlan:
    """Turn a request-url response body into exactly one plan variant."""
    if payload.get("useDirectUpload") and payload.get("directUploadUrl"):
        return DirectUpload(endpoint=payload["directUploadUrl"])
    if payload.get("uploadURL") and payload.get("objectPath"):
        expires_at = _parse_instant(payload.get("expiresAt")) or datetime.max.replace(
            tzinfo=timezone.utc
        )
        return PresignedUpload(
            write_url=payload["uploadURL"],
            expires_at=expires_at,
            object_path=payload["objectPath"],
        )
    raise StorageUnavailable("No upload method available")


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or fallback)
    return fallback


def _object_path(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError as exc:
        raise UploadRejected("Upload response was not valid JSON") from exc
    object_path = body.get("objectPath") if isinstance(body, dict) else None
    if not isinstance(object_path, str) or not object_path:
        raise UploadRejected("Upload response did not include an object path")
    return object_path


class UploadClient:
    """
    Caller side of the upload negotiation.

    One negotiation, one transfer: a plan is never replayed, whatever the
    outcome of its transfer. Callers that need another try must call
    ``upload`` (or ``request_plan``) again.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        storage_transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
        max_upload_bytes: int | None = 10 * 1024 * 1024,
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.storage_transport = storage_transport
        self.headers = headers or {}
        self.max_upload_bytes = max_upload_bytes
        self.timeout = timeout
        self._spent: set[str] = set()

    def _api_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            headers=self.headers,
            timeout=self.timeout,
        )

    def _storage_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.storage_transport, timeout=self.timeout)

    async def request_plan(self, name: str, size: int, content_type: str) -> UploadPlan:
        payload = {"name": name, "size": size, "contentType": content_type}
        try:
            async with self._api_client() as client:
                response = await client.post(REQUEST_URL_PATH, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Upload negotiation failed: %s", exc)
            raise StorageUnavailable("Could not reach the upload service") from exc

        if response.status_code == 413:
            raise PayloadTooLarge(_error_message(response, "File is too large"))
        if response.status_code == 400:
            raise InvalidUploadRequest(_error_message(response, "Invalid upload request"))
        if response.is_error:
            raise StorageUnavailable(_error_message(response, "Failed to get upload URL"))
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageUnavailable("Upload service sent an unreadable plan") from exc
        if not isinstance(payload, dict):
            raise StorageUnavailable("Upload service sent an unreadable plan")
        return plan_from_payload(payload)

    def _claim(self, plan: UploadPlan) -> None:
        keys = {plan.plan_id}
        if isinstance(plan, PresignedUpload):
            keys.add(plan.write_url)
        if keys & self._spent:
            raise UploadRejected("Upload plan already used; request a new one")
        self._spent.update(keys)

    async def transfer(
        self,
        plan: UploadPlan,
        data: bytes,
        *,
        name: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> str:
        self._claim(plan)
        if isinstance(plan, PresignedUpload):
            return await self._put_presigned(plan, data, content_type)
        if isinstance(plan, DirectUpload):
            return await self._post_direct(plan, data, name, content_type)
        raise UploadRejected("Unknown upload plan")

    async def _put_presigned(self, plan: PresignedUpload, data: bytes, content_type: str) -> str:
        if datetime.now(timezone.utc) >= plan.expires_at:
            raise UploadRejected("Upload URL expired; request a new one")
        try:
            async with self._storage_client() as client:
                response = await client.put(
                    plan.write_url, content=data, headers={"Content-Type": content_type}
                )
        except httpx.HTTPError as exc:
            raise UploadRejected("Failed to upload file to storage") from exc
        if not response.is_success:
            logger.warning("Storage rejected upload with status %s", response.status_code)
            raise UploadRejected(
                "Failed to upload file to storage", details={"status": response.status_code}
            )
        # object storage does not echo the path back; it was fixed at negotiation
        return plan.object_path

    async def _post_direct(
        self, plan: DirectUpload, data: bytes, name: str, content_type: str
    ) -> str:
        files = {"file": (name, data, content_type)}
        try:
            async with self._api_client() as client:
                response = await client.post(plan.endpoint, files=files)
        except httpx.HTTPError as exc:
            raise UploadRejected("Failed to send file") from exc
        if response.status_code == 413:
            raise PayloadTooLarge(_error_message(response, "File is too large"))
        if not response.is_success:
            raise UploadRejected(
                _error_message(response, "Failed to send file"),
                details={"status": response.status_code},
            )
        return _object_path(response)

    async def upload(
        self, data: bytes, name: str, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> str:
        if self.max_upload_bytes is not None and len(data) > self.max_upload_bytes:
            raise PayloadTooLarge(
                "File exceeds the maximum upload size",
                details={"max_bytes": self.max_upload_bytes},
            )
        content_type = content_type or DEFAULT_CONTENT_TYPE
        plan = await self.request_plan(name, len(data), content_type)
        return await self.transfer(plan, data, name=name, content_type=content_type)
