from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
from uuid import UUID

from jose import jwt
from jose.exceptions import JWTError

from src.application.errors import AuthError
from src.infrastructure.auth.context import AuthContext

ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True, frozen=True)
class JWTService:
    """Back-office bearer tokens. Customers never hold one; they sign through links."""

    secret_key: str
    algorithm: str = "HS256"
    access_token_expires_minutes: int = 60
    issuer: str | None = None
    audience: str | None = None

    def create_access_token(
        self,
        *,
        subject: UUID,
        extra_claims: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=self.access_token_expires_minutes)
        claims: dict[str, Any] = {
            **(extra_claims or {}),
            "sub": str(subject),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "typ": ACCESS_TOKEN_TYPE,
        }
        if self.issuer:
            claims["iss"] = self.issuer
        if self.audience:
            claims["aud"] = self.audience
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def authenticate(self, token: str) -> AuthContext:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
            )
        except JWTError as exc:
            raise AuthError("Token validation failed") from exc
        if claims.get("typ") != ACCESS_TOKEN_TYPE:
            raise AuthError("Invalid access token")
        try:
            user_id = UUID(str(claims["sub"]))
        except (KeyError, ValueError) as exc:
            raise AuthError("Token subject is not a valid UUID") from exc
        return AuthContext(user_id=user_id, claims=claims)
