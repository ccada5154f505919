from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from src.domain.models.upload import StoredObject

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
}

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,16}$")
_SAFE_FILE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*(\.[A-Za-z0-9]{1,16})?$")


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(PurePosixPath(file_name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def safe_extension(original_name: str) -> str:
    # Only the extension of the client-supplied name survives
    suffix = PurePosixPath(original_name.replace("\\", "/")).suffix
    return suffix if _SAFE_EXTENSION.match(suffix) else ""


@dataclass(slots=True)
class LocalFile:
    data: bytes
    content_type: str


@dataclass(slots=True)
class LocalFileRef:
    path: Path
    content_type: str


class LocalFileStore:
    def __init__(self, root: str | Path, *, public_prefix: str = "/api/files") -> None:
        self.root = Path(root)
        self.public_prefix = public_prefix.rstrip("/")

    def generate_file_name(self, original_name: str) -> str:
        timestamp = time.time_ns() // 1_000_000
        return f"{timestamp}-{secrets.token_hex(8)}{safe_extension(original_name)}"

    def public_path(self, file_name: str) -> str:
        return f"{self.public_prefix}/{file_name}"

    def _resolve(self, file_name: str) -> Path | None:
        if not _SAFE_FILE_NAME.match(file_name):
            return None
        return self.root / file_name

    async def save(self, data: bytes, original_name: str, content_type: str) -> StoredObject:
        file_name = self.generate_file_name(original_name)
        path = self.root / file_name

        def _write() -> None:
            self.root.mkdir(parents=True, exist_ok=True)
            # "x" mode refuses to overwrite on the off chance of a name clash
            with open(path, "xb") as fh:
                fh.write(data)

        await asyncio.to_thread(_write)
        logger.info("Stored local file %s (%d bytes)", file_name, len(data))
        return StoredObject(
            file_name=file_name,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size_bytes=len(data),
        )

    async def read(self, file_name: str) -> LocalFile | None:
        path = self._resolve(file_name)
        if path is None:
            return None

        def _read() -> bytes | None:
            try:
                return path.read_bytes()
            except (FileNotFoundError, IsADirectoryError):
                return None

        data = await asyncio.to_thread(_read)
        if data is None:
            return None
        return LocalFile(data=data, content_type=content_type_for(file_name))

    async def locate(self, file_name: str) -> LocalFileRef | None:
        """Find a stored file on disk without loading it, for streaming responses."""
        path = self._resolve(file_name)
        if path is None:
            return None
        if not await asyncio.to_thread(path.is_file):
            return None
        return LocalFileRef(path=path, content_type=content_type_for(file_name))

    async def delete(self, file_name: str) -> bool:
        path = self._resolve(file_name)
        if path is None:
            return False

        def _unlink() -> bool:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            return True

        return await asyncio.to_thread(_unlink)
