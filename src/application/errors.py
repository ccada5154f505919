from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    code = "app_error"
    status_code = 400

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class AuthError(AppError):
    code = "auth_error"
    status_code = 401


class NotFound(AppError):
    code = "not_found"
    status_code = 404


class ValidationError(AppError):
    code = "validation_error"
    status_code = 422


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class InfrastructureError(AppError):
    code = "infrastructure_error"
    status_code = 500


# Uploads


class InvalidUploadRequest(AppError):
    code = "invalid_upload_request"
    status_code = 400


class PayloadTooLarge(AppError):
    code = "payload_too_large"
    status_code = 413


class StorageUnavailable(InfrastructureError):
    code = "storage_unavailable"
    status_code = 500


class UploadRejected(AppError):
    code = "upload_rejected"
    status_code = 502


class ObjectNotFound(NotFound):
    code = "object_not_found"


# Contract signatures


class TokenNotFound(NotFound):
    code = "token_not_found"


class TokenExpired(AppError):
    code = "token_expired"
    status_code = 410


class TokenRevoked(AppError):
    code = "token_revoked"
    status_code = 410


class TokenAlreadyConsumed(AppError):
    code = "token_already_consumed"
    status_code = 409


class IdentityMismatch(AppError):
    code = "identity_mismatch"
    status_code = 400


class TooManyAttempts(AppError):
    code = "too_many_attempts"
    status_code = 429
