"""Signed, time-limited bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional
from uuid import UUID

import jwt
from pydantic import BaseModel

from profusion.core.config import settings
from profusion.core.logging import get_logger

logger = get_logger(__name__)

REQUIRED_CLAIMS = ["id", "role_id", "iat", "exp"]


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedToken(TokenError):
    """The token cannot be decoded or lacks required claims."""


class BadSignature(TokenError):
    """The signature does not match the payload."""


class TokenExpired(TokenError):
    """The token is past its expiry."""


class TokenClaims(BaseModel):
    """Decoded token payload."""

    user_id: UUID
    role_id: UUID
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies HMAC-signed JWTs.

    Tokens are stateless: there is no revocation list, so a token stays
    valid for its whole lifetime even if the account changes afterwards.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls) -> "TokenService":
        return cls(
            secret=settings.SECRET_KEY.get_secret_value(),
            algorithm=settings.ALGORITHM,
            ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    def issue(self, user_id: UUID, role_id: UUID) -> str:
        """Create a signed token for the given user and role."""
        now = self._clock()
        payload: Dict[str, Any] = {
            "id": str(user_id),
            "role_id": str(role_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Check signature then expiry and return the claims.

        Expiry is judged by this service's clock, not by PyJWT's wall clock:
        a token is expired once ``now >= exp``.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise BadSignature("Token signature mismatch") from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(str(e)) from e

        try:
            expired = self._clock().timestamp() >= payload["exp"]
        except TypeError as e:
            raise MalformedToken("Token expiry is not a timestamp") from e
        if expired:
            raise TokenExpired("Token has expired")

        try:
            return TokenClaims(
                user_id=payload["id"],
                role_id=payload["role_id"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (ValueError, TypeError) as e:
            raise MalformedToken("Token claims are invalid") from e


token_service = TokenService.from_settings()
