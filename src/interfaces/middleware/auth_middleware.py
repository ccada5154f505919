from __future__ import annotations

from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from src.application.errors import AuthError

# Upload, file and public signature routes are open: the signing page is
# reached from an emailed link without a session.
PROTECTED_PATHS: Iterable[str] = ("/api/contracts",)


def _bearer_token(request: Request) -> str:
    authorization = request.headers.get("Authorization")
    if not authorization:
        raise AuthError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid Authorization header")
    return token.strip()


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, protected_paths: Iterable[str] = PROTECTED_PATHS) -> None:
        super().__init__(app)
        self.protected_paths = tuple(protected_paths)

    def _is_protected(self, request: Request) -> bool:
        # CORS preflight never carries credentials
        if request.method == "OPTIONS":
            return False
        return request.url.path.startswith(self.protected_paths)

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self._is_protected(request):
            return await call_next(request)

        jwt_service = getattr(request.app.state, "jwt_service", None)
        if jwt_service is None:
            raise RuntimeError("JWT service not configured")
        try:
            request.state.auth_context = jwt_service.authenticate(_bearer_token(request))
        except AuthError as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={"code": exc.code, "message": exc.message},
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)
