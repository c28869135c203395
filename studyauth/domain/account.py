"""Account maintenance for authenticated callers."""

import logging
from dataclasses import dataclass

from .boundary import workflow_boundary
from .exceptions import Unauthenticated, Unauthorized, ValidationError
from .notifications import PASSWORD_UPDATED_SUBJECT, BestEffortNotifier, password_updated_email
from .passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from .ports import Account, IdentityRepository

logger = logging.getLogger(__name__)


@dataclass
class AccountService:
    identities: IdentityRepository
    hasher: PasswordHasher
    notifier: BestEffortNotifier

    @workflow_boundary("me")
    def current_account(self, identity_id: str) -> Account:
        """Fresh view of the caller's identity."""
        record = self.identities.get_by_id(identity_id)
        if record is None:
            raise Unauthenticated(identity_id)
        return record.to_account()

    @workflow_boundary("change-password")
    def change_password(self, identity_id: str, old_password: str, new_password: str) -> None:
        """
        Replace the caller's password after checking the old one.

        The confirmation email is sent after the new digest is stored; a
        delivery failure is logged and the change stands.

        Raises:
            ValidationError: Either password missing, or new one too long
            Unauthenticated: Token refers to an identity that no longer exists
            Unauthorized: Old password does not match
        """
        if not old_password or not new_password:
            raise ValidationError("Old and new password are required")
        if password_too_long(new_password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        record = self.identities.get_by_id(identity_id)
        if record is None:
            raise Unauthenticated(identity_id)

        if not self.hasher.verify(old_password, record.password_hash):
            raise Unauthorized(record.email)

        updated = self.identities.update_password(record.id, self.hasher.hash(new_password))
        if updated is None:
            raise Unauthenticated(identity_id)
        logger.info("Password changed for account %s", updated.id)

        self.notifier.notify(
            updated.email,
            PASSWORD_UPDATED_SUBJECT,
            password_updated_email(updated.email, f"{updated.first_name} {updated.last_name}"),
        )
