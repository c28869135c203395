"""
Registration workflow - OTP-gated account creation.

Signup steps, in order, each failing fast:

1. All required fields present, password equals confirmation
   (ValidationError, nothing is accepted partially)
2. No identity exists for the email (Conflict)
3. Submitted passcode matches the newest OTP for the email (InvalidOTP)
4. Password hashed with bcrypt
5. Approval flag: False for Instructor accounts, True otherwise
6. Empty profile and identity created atomically by the repository

The identity is returned as an Account, which has no password digest.
"""

import logging
from dataclasses import dataclass

from .boundary import workflow_boundary
from .exceptions import Conflict, InvalidOTP, StoreUnavailable, ValidationError
from .otp import OTPLedger
from .passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from .ports import Account, IdentityRepository, NewIdentity, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignupForm:
    """Registration fields as submitted by the client."""

    first_name: str
    last_name: str
    email: str
    password: str
    confirm_password: str
    account_type: Role | str
    contact_number: str | None = None


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates passcode validation, password hashing and identity
    creation.
    """

    identities: IdentityRepository
    otp_ledger: OTPLedger
    hasher: PasswordHasher

    @workflow_boundary("signup")
    def signup(self, form: SignupForm, otp: str) -> Account:
        """
        Create an identity for a verified email.

        Args:
            form: Submitted registration fields
            otp: Passcode the client received by email

        Returns:
            The created account

        Raises:
            ValidationError: Missing field, mismatched confirmation or bad role
            Conflict: Email already registered
            InvalidOTP: Passcode missing, superseded or wrong
        """
        email = (form.email or "").strip()
        role = self._validate(form, email, otp)

        if self.identities.get_by_email(email) is not None:
            raise Conflict(email)

        if not self.otp_ledger.validate(email, otp):
            raise InvalidOTP(email)

        new_identity = NewIdentity(
            email=email,
            first_name=form.first_name.strip(),
            last_name=form.last_name.strip(),
            password_hash=self.hasher.hash(form.password),
            role=role,
            approved=role is not Role.INSTRUCTOR,
            contact_number=form.contact_number or None,
        )
        record = self.identities.create_with_profile(new_identity)
        if record is None:
            # Lost a race with a concurrent signup for the same email
            raise Conflict(email)

        try:
            self.otp_ledger.consume(email)
        except StoreUnavailable as exc:
            # The identity is committed; unconsumed records only hold passcode values
            logger.warning("Could not mark OTPs consumed for %s: %s", email, exc)
        logger.info("Registered %s account %s", role.value, record.id)
        return record.to_account()

    @staticmethod
    def _validate(form: SignupForm, email: str, otp: str) -> Role:
        required = (
            form.first_name,
            form.last_name,
            email,
            form.password,
            form.confirm_password,
            form.account_type,
            otp,
        )
        if any(not value or (isinstance(value, str) and not value.strip()) for value in required):
            raise ValidationError("All fields are required")

        if form.password != form.confirm_password:
            raise ValidationError("Password and Confirm Password do not match")

        if password_too_long(form.password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        try:
            return Role(form.account_type)
        except ValueError:
            raise ValidationError("Unknown account type") from None
