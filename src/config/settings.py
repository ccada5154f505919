from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    log_level: str = "INFO"
    environment: str = "dev"
    jwt_secret_key: SecretStr
    jwt_algorithm: str = "HS256"
    jwt_access_token_expires_minutes: int = 60
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    # CORS
    cors_allow_origins: str = "*"
    # Local file storage (used when no remote bucket is configured)
    upload_dir: str = "./uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    # S3 object storage
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_prefix: str = ""  # e.g. "dev/" or "prod/"
    s3_endpoint_url: str | None = None
    s3_presign_expires_seconds: int = 900
    # Signing links
    public_base_url: str = "http://localhost:5000"
    signing_path: str = "/assinar"
    signature_token_ttl_hours: int = 48
    signature_max_attempts: int = 5
    # Email
    email_provider: str = "logging"  # logging | smtp
    email_from_name: str = "MayBack Cars"
    email_from_address: str = "no-reply@mayback.local"
    email_default_locale: str = "pt"
    email_primary_color: str = "#1e3a5f"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("database_url")
    @classmethod
    def ensure_asyncpg_scheme(cls, value: str) -> str:
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql+asyncpg://", 1)
        if value.startswith("postgresql://") and "+" not in value.split("://", 1)[0]:
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @field_validator("signing_path")
    @classmethod
    def ensure_leading_slash(cls, value: str) -> str:
        value = value.rstrip("/")
        return value if value.startswith("/") else f"/{value}"

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Convert cors_allow_origins string to list"""
        if isinstance(self.cors_allow_origins, str):
            return [v.strip() for v in self.cors_allow_origins.split(",") if v.strip()]
        return self.cors_allow_origins

    @property
    def remote_storage_enabled(self) -> bool:
        return bool(self.s3_bucket)

    def signing_url(self, token: str) -> str:
        return f"{self.public_base_url.rstrip('/')}{self.signing_path}/{token}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
