"""
Identity provider: password hashing, signed role assertions, and the
FastAPI dependencies that turn a bearer header into an ``Identity``.

Tokens are HS256 JWTs carrying ``sub`` (account id, as a string) and
``role`` (student, club or admin), valid for ACCESS_TOKEN_EXPIRE_MINUTES.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt
import structlog
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_events.core.config import get_settings
from campus_events.core.exceptions import Forbidden, Unauthenticated
from campus_events.core.logging import get_logger

logger = get_logger(__name__)

ROLES = ("student", "club", "admin")

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return _password_hasher.verify(hashed_password, password)
    except (VerificationError, InvalidHashError):
        return False


@dataclass(frozen=True)
class Identity:
    subject_id: int
    role: str

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


class TokenProvider:
    """Issues and verifies time-boxed identity assertions."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, subject_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        payload = {"sub": str(subject_id), "role": role, "iat": now, "exp": expire}
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Decode a token or raise Unauthenticated."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token has expired")
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid token")

        role = payload.get("role")
        try:
            subject_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise Unauthenticated("Invalid token")
        if role not in ROLES:
            raise Unauthenticated("Invalid token")
        return Identity(subject_id=subject_id, role=role)


@lru_cache()
def get_token_provider() -> TokenProvider:
    settings = get_settings()
    return TokenProvider(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_access_token(subject_id: int, role: str) -> str:
    return get_token_provider().issue(subject_id, role)


_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenProvider = Depends(get_token_provider),
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("No token provided")
    identity = tokens.verify(credentials.credentials)
    structlog.contextvars.bind_contextvars(subject_id=identity.subject_id, role=identity.role)
    return identity


def require_role(*roles: str):
    """Dependency factory: the caller must hold one of ``roles``.

    Usage:
        @router.post("/", dependencies=[Depends(require_role("club"))])
    """
    allowed = tuple(roles)

    async def _dep(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not identity.has_role(*allowed):
            logger.warning("role_denied", required=list(allowed), role=identity.role)
            raise Forbidden(f"Access denied. {' or '.join(r.capitalize() for r in allowed)} authorization required")
        return identity

    return _dep


require_student = require_role("student")
require_club = require_role("club")
require_admin = require_role("admin")
