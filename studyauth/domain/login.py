"""Login workflow - credential verification and session issuance."""

import logging
from dataclasses import dataclass
from datetime import datetime

from .boundary import workflow_boundary
from .exceptions import NotFound, Unauthorized, ValidationError
from .passwords import PasswordHasher
from .ports import Account, IdentityRepository
from .tokens import SessionTokenIssuer, TokenClaims

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    expires_at: datetime
    account: Account


@dataclass
class LoginService:
    """Verifies a password and issues a fresh session token on every success."""

    identities: IdentityRepository
    hasher: PasswordHasher
    token_issuer: SessionTokenIssuer

    @workflow_boundary("login")
    def login(self, email: str, password: str) -> LoginResult:
        """
        Raises:
            ValidationError: Email or password missing
            NotFound: No identity for email
            Unauthorized: Password does not match
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Please fill all required fields")

        record = self.identities.get_by_email(email)
        if record is None:
            raise NotFound(email)

        if not self.hasher.verify(password, record.password_hash):
            logger.info("Rejected password for account %s", record.id)
            raise Unauthorized(email)

        issued = self.token_issuer.issue(
            TokenClaims(email=record.email, id=record.id, role=record.role)
        )
        return LoginResult(token=issued.token, expires_at=issued.expires_at, account=record.to_account())
