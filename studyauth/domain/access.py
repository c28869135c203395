"""
Access gate - per-request authentication and role authorization.

authenticate() turns a raw bearer token into claims. authorize() then
re-reads the caller's role from the store instead of trusting the role
embedded in the token, so a role change applies on the next request
rather than at token expiry. The gate keeps no state between requests.
"""

from dataclasses import dataclass

from .boundary import workflow_boundary
from .exceptions import Forbidden, InvalidToken, Unauthenticated
from .ports import Account, IdentityRepository, Role
from .tokens import SessionTokenIssuer, TokenClaims


@dataclass
class AccessGate:
    identities: IdentityRepository
    token_issuer: SessionTokenIssuer

    def authenticate(self, token: str | None) -> TokenClaims:
        """
        Raises:
            Unauthenticated: Token missing, or invalid for any reason
        """
        if not token:
            raise Unauthenticated("token missing")
        try:
            return self.token_issuer.verify(token)
        except InvalidToken:
            raise Unauthenticated("token invalid") from None

    @workflow_boundary("authorize")
    def authorize(self, claims: TokenClaims, role: Role) -> Account:
        """
        Raises:
            Forbidden: Stored role differs from role, or identity is gone
        """
        record = self.identities.get_by_email(claims.email)
        if record is None or record.role != role:
            raise Forbidden(role.value)
        return record.to_account()
