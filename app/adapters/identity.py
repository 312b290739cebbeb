"""Identity providers: resolve the calling user from a request."""

from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from fastapi import Request
from jose import JWTError, jwt

from app.adapters.base import IdentityProvider
from app.config import get_settings
from app.exceptions import NotAuthenticated
from app.infra.logging_config import get_logger

logger = get_logger("identity")

USER_ID_HEADER = "X-User-Id"


def _parse_user_id(value: Optional[str]) -> UUID:
    if not value:
        raise NotAuthenticated()
    try:
        return UUID(str(value))
    except ValueError:
        raise NotAuthenticated("Invalid user id")


class JWTIdentityProvider(IdentityProvider):
    """Verifies `Authorization: Bearer <jwt>`; the `sub` claim is the user id."""

    def __init__(
        self,
        secret: str,
        algorithms: Sequence[str] = ("HS256",),
        audience: Optional[str] = None,
    ) -> None:
        self._secret = secret
        self._algorithms = list(algorithms)
        self._audience = audience

    def current_user_id(self, request: Request) -> UUID:
        authorization = request.headers.get("Authorization")
        if not authorization:
            raise NotAuthenticated("Authorization header missing")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise NotAuthenticated("Bearer token required")

        try:
            payload = jwt.decode(
                token.strip(),
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token expired")
            raise NotAuthenticated("Token expired")
        except JWTError as e:
            logger.warning("Token verification failed: %s", e)
            raise NotAuthenticated("Invalid token")

        return _parse_user_id(payload.get("sub"))


class HeaderIdentityProvider(IdentityProvider):
    """Trusts the X-User-Id header. Only for local development and tests."""

    def current_user_id(self, request: Request) -> UUID:
        return _parse_user_id(request.headers.get(USER_ID_HEADER))


def build_identity_provider_from_env() -> IdentityProvider:
    settings = get_settings()
    if settings.disable_auth:
        return HeaderIdentityProvider()
    if not settings.auth_jwt_secret:
        logger.warning("AUTH_JWT_SECRET is not set; every request will be rejected.")
    return JWTIdentityProvider(
        secret=settings.auth_jwt_secret or "",
        algorithms=settings.jwt_algorithms,
        audience=settings.auth_jwt_audience,
    )
