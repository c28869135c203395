"""
Session tokens - signed, self-contained bearer credentials.

Tokens are HS256 JWTs (python-jose) carrying {email, id, role} plus
iat/exp. Nothing is stored server-side: validity is signature plus
expiry, checked together in verify(). Every failure mode collapses to a
single InvalidToken so callers cannot learn which check failed.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import JOSEError

from .exceptions import InvalidToken
from .ports import Role

DEFAULT_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    """Identity attributes embedded in a session token."""

    email: str
    id: str
    role: Role


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class SessionTokenIssuer:
    """Creates and verifies session tokens with a process-wide secret."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, claims: TokenClaims) -> IssuedToken:
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        payload = {
            "email": claims.email,
            "id": claims.id,
            "role": claims.role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature and expiry, return the embedded claims.

        Raises:
            InvalidToken: Malformed, badly signed, expired, or missing claims
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked below against the injected clock
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except (JOSEError, ValueError, TypeError):
            raise InvalidToken() from None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            raise InvalidToken()

        email = payload.get("email")
        identity_id = payload.get("id")
        if not isinstance(email, str) or not isinstance(identity_id, str):
            raise InvalidToken()
        try:
            role = Role(payload.get("role"))
        except ValueError:
            raise InvalidToken() from None

        return TokenClaims(email=email, id=identity_id, role=role)
