from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request

from src.application.errors import AuthError
from src.config.settings import Settings
from src.infrastructure.auth.context import AuthContext
from src.infrastructure.db.session import SQLAlchemyUnitOfWork
from src.infrastructure.email.models import EmailService
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer
from src.infrastructure.services.upload_negotiator import UploadNegotiator
from src.infrastructure.storage.local import LocalFileStore
from src.infrastructure.storage.ports import RemoteObjectStore


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured")
    return value


async def get_auth_context(request: Request) -> AuthContext:
    context = getattr(request.state, "auth_context", None)
    if context is None:
        raise AuthError("Authentication required")
    return context


async def get_uow(request: Request) -> AsyncIterator[SQLAlchemyUnitOfWork]:
    uow = SQLAlchemyUnitOfWork(_state(request, "session_factory"))
    async with uow:
        yield uow


def get_app_settings(request: Request) -> Settings:
    return _state(request, "settings")


def get_negotiator(request: Request) -> UploadNegotiator:
    return _state(request, "upload_negotiator")


def get_local_store(request: Request) -> LocalFileStore:
    return _state(request, "local_store")


def get_remote_store(request: Request) -> RemoteObjectStore | None:
    # None simply means this deployment stores files locally
    return getattr(request.app.state, "remote_store", None)


def get_email_service(request: Request) -> EmailService:
    return _state(request, "email_service")


def get_email_renderer(request: Request) -> EmailTemplateRenderer:
    return _state(request, "email_renderer")
