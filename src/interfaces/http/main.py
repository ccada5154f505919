from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.settings import Settings, get_settings
from src.infrastructure.auth.jwt_service import JWTService
from src.infrastructure.db.session import create_engine, create_session_factory
from src.infrastructure.email.factory import create_email_service
from src.infrastructure.email.models import EmailService
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer
from src.infrastructure.services.upload_negotiator import UploadConfig, UploadNegotiator
from src.infrastructure.storage.local import LocalFileStore
from src.infrastructure.storage.ports import RemoteObjectStore
from src.interfaces.http.deps import get_negotiator
from src.interfaces.http.routers import objects, signatures, uploads
from src.interfaces.middleware.auth_middleware import AuthMiddleware
from src.interfaces.middleware.error_handler import register_error_handlers

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# third-party loggers that follow the application level
ALIGNED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx")
# SQL echo and presigned URLs stay out of the logs below WARNING
QUIET_LOGGERS = ("sqlalchemy.engine", "botocore", "boto3", "s3transfer")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root = logging.getLogger()
    # uvicorn --reload re-imports this module; one stream handler is enough
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    for name in ALIGNED_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _build_remote_store(settings: Settings) -> RemoteObjectStore | None:
    if not settings.remote_storage_enabled:
        return None
    from src.infrastructure.storage.s3 import S3ObjectStore

    return S3ObjectStore(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        prefix=settings.s3_prefix,
        endpoint_url=settings.s3_endpoint_url,
    )


def create_app(
    *,
    settings: Settings | None = None,
    remote_store: RemoteObjectStore | None = None,
    email_service: EmailService | None = None,
    jwt_service: JWTService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(
        title="MayBack Cars Backend",
        version="0.1.0",
        description="Asset uploads and contract signature links for the dealership back office",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.jwt_service = jwt_service or JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
        access_token_expires_minutes=settings.jwt_access_token_expires_minutes,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )
    app.state.email_service = email_service or create_email_service(settings)
    app.state.email_renderer = EmailTemplateRenderer.create_default()

    # Storage mode is fixed here for the lifetime of the process
    if remote_store is None:
        remote_store = _build_remote_store(settings)
    app.state.remote_store = remote_store
    app.state.local_store = LocalFileStore(settings.upload_dir)
    app.state.upload_negotiator = UploadNegotiator(
        UploadConfig.from_settings(settings, remote_available=remote_store is not None),
        remote_store,
    )
    logger.info("Upload mode: %s", app.state.upload_negotiator.mode.value)
    register_error_handlers(app)

    app.include_router(uploads.router)
    app.include_router(objects.router)
    app.include_router(signatures.admin_router)
    app.include_router(signatures.public_router)

    @app.get("/api/health", tags=["health"])
    async def health(negotiator: UploadNegotiator = Depends(get_negotiator)) -> dict[str, str]:
        return {"status": "ok", "uploadMode": negotiator.mode.value}

    # CORS is added last so it wraps auth and answers preflight requests itself
    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
