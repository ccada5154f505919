from __future__ import annotations

import os
import sys
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import cast
from urllib.parse import urlsplit
from uuid import uuid4

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///default.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from src.application.errors import ObjectNotFound
from src.config.settings import Settings
from src.infrastructure.db.base import Base
from src.infrastructure.db.orm import contract_signature  # noqa: F401
from src.infrastructure.db.orm.contract import ContractORM
from src.infrastructure.email.models import EmailMessage, EmailService
from src.infrastructure.storage.ports import OBJECTS_PREFIX, ObjectStream, PresignedWrite
from src.interfaces.http.main import create_app

STORAGE_HOST = "storage.test"
CPF = "123.456.789-09"
CNPJ = "12.345.678/0001-95"


class InMemoryObjectStore:
    """Object storage double: presigned PUTs land in a dict, served back on read."""

    bucket = "dealer-assets"

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.minted: dict[str, datetime] = {}
        self.put_status: int | None = None
        self.fail_minting = False

    async def mint_write_url(self, content_type: str, *, expires_seconds: int) -> PresignedWrite:
        if self.fail_minting:
            raise RuntimeError("storage sidecar down")
        key = f"uploads/{uuid4()}"
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_seconds)
        self.minted[key] = expires_at
        url = f"https://{STORAGE_HOST}/{self.bucket}/{key}?X-Amz-Expires={expires_seconds}"
        return PresignedWrite(
            write_url=url, object_path=self.normalize_object_path(url), expires_at=expires_at
        )

    def normalize_object_path(self, url: str) -> str:
        path = urlsplit(url).path
        prefix = f"/{self.bucket}/"
        if not path.startswith(prefix):
            return url
        return f"{OBJECTS_PREFIX}{path[len(prefix):]}"

    async def open_object(self, object_path: str) -> ObjectStream:
        key = object_path[len(OBJECTS_PREFIX) :]
        if key not in self.objects:
            raise ObjectNotFound("Object not found")
        data, content_type = self.objects[key]

        async def _chunks():
            yield data

        return ObjectStream(chunks=_chunks(), content_type=content_type, size_bytes=len(data))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        key = request.url.path[len(f"/{self.bucket}/") :]
        if request.method != "PUT" or key not in self.minted:
            return httpx.Response(403, text="AccessDenied")
        if self.put_status is not None:
            return httpx.Response(self.put_status, text="rejected")
        if datetime.now(timezone.utc) > self.minted[key]:
            return httpx.Response(403, text="Request has expired")
        self.objects[key] = (
            request.content,
            request.headers.get("content-type", "application/octet-stream"),
        )
        return httpx.Response(200)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


class RecordingEmailService(EmailService):
    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[EmailMessage] = []
        self.fail = fail

    async def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise ConnectionError("SMTP unreachable")
        self.sent.append(message)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    db_path = tmp_path / "test.db"
    return Settings.model_validate(
        {
            "database_url": f"sqlite+aiosqlite:///{db_path}",
            "jwt_secret_key": "test-secret",
            "log_level": "INFO",
            "environment": "test",
            "upload_dir": str(tmp_path / "uploads"),
            "public_base_url": "https://loja.test",
        }
    )


@pytest.fixture()
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture()
def email_service() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture()
def app(test_settings: Settings, email_service: RecordingEmailService):
    return create_app(settings=test_settings, email_service=email_service)


@pytest.fixture()
def remote_app(
    test_settings: Settings,
    email_service: RecordingEmailService,
    object_store: InMemoryObjectStore,
):
    return create_app(
        settings=test_settings, email_service=email_service, remote_store=object_store
    )


async def _prepared_client(app) -> AsyncClient:
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    async with await _prepared_client(app) as client:
        yield client
    await app.state.engine.dispose()


@pytest.fixture()
async def remote_client(remote_app) -> AsyncIterator[AsyncClient]:
    async with await _prepared_client(remote_app) as client:
        yield client
    await remote_app.state.engine.dispose()


@pytest.fixture()
def admin_headers(app) -> dict[str, str]:
    token = app.state.jwt_service.create_access_token(subject=uuid4())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def seeded_contracts(app, client) -> dict[str, int]:
    async with app.state.session_factory() as session:
        async_session = cast(AsyncSession, session)
        cpf_contract = ContractORM(
            customer_name="Maria Souza",
            customer_document=CPF,
            customer_email="maria@example.com",
            vehicle_description="Toyota Corolla 2021",
        )
        cnpj_contract = ContractORM(
            customer_name="Auto Peças Ltda",
            customer_document=CNPJ,
            customer_email=None,
            vehicle_description="Fiat Strada 2020",
        )
        bad_document = ContractORM(
            customer_name="Sem Documento",
            customer_document="1234",
            customer_email="sem@example.com",
            vehicle_description="VW Gol 2015",
        )
        async_session.add_all([cpf_contract, cnpj_contract, bad_document])
        await async_session.commit()
        return {
            "cpf": cpf_contract.id,
            "cnpj": cnpj_contract.id,
            "bad_document": bad_document.id,
        }
