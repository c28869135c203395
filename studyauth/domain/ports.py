"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the value types shared across the identity core and
the interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """Account classes. Values match the stored and token-embedded form."""

    STUDENT = "Student"
    INSTRUCTOR = "Instructor"
    ADMIN = "Admin"


@dataclass(frozen=True)
class Account:
    """
    Caller-visible view of an identity.

    Carries no credential material, so anything built from it can be
    returned to a client as-is.
    """

    id: str
    email: str
    first_name: str
    last_name: str
    role: Role
    approved: bool
    profile_id: str | None = None
    contact_number: str | None = None
    image: str = ""


@dataclass(frozen=True)
class IdentityRecord:
    """Stored identity, including the bcrypt password digest."""

    id: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    role: Role
    approved: bool
    profile_id: str | None = None
    contact_number: str | None = None
    image: str = ""

    def to_account(self) -> Account:
        """Strip the password digest."""
        return Account(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            role=self.role,
            approved=self.approved,
            profile_id=self.profile_id,
            contact_number=self.contact_number,
            image=self.image,
        )


@dataclass(frozen=True)
class NewIdentity:
    """Fields required to create an identity and its empty profile."""

    email: str
    first_name: str
    last_name: str
    password_hash: str
    role: Role
    approved: bool
    contact_number: str | None = None


@dataclass(frozen=True)
class OTPRecord:
    """One issued passcode. Only the newest record per email is matchable."""

    email: str
    passcode: str
    created_at: datetime


class IdentityRepository(Protocol):
    """Port interface for identity persistence."""

    def get_by_email(self, email: str) -> IdentityRecord | None:
        """Exact (case-sensitive) lookup by email."""
        ...

    def get_by_id(self, identity_id: str) -> IdentityRecord | None:
        """Lookup by identity id."""
        ...

    def create_with_profile(self, identity: NewIdentity) -> IdentityRecord | None:
        """
        Create an empty profile and the identity referencing it.

        Both rows are written atomically: either both exist afterwards or
        neither does.

        Args:
            identity: Identity fields with the password already hashed

        Returns:
            The created record, or None if the email is already taken
        """
        ...

    def update_password(self, identity_id: str, password_hash: str) -> IdentityRecord | None:
        """
        Replace the stored password digest.

        Returns:
            The updated record, or None if the identity does not exist
        """
        ...


class OTPRepository(Protocol):
    """Port interface for passcode persistence."""

    def add(self, email: str, passcode: str, created_at: datetime) -> OTPRecord:
        """Persist a new passcode record. Existing records are left untouched."""
        ...

    def latest_for_email(self, email: str) -> OTPRecord | None:
        """Most recently created record for email, consumed or not."""
        ...

    def passcode_in_use(self, passcode: str) -> bool:
        """True if any unconsumed record bears this exact passcode."""
        ...

    def mark_consumed(self, email: str) -> None:
        """Mark every record for email as consumed by a successful signup."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, email: str, subject: str, body: str) -> None:
        """
        Deliver one message.

        Args:
            email: Recipient email address
            subject: Subject line
            body: HTML body

        Raises:
            Any exception on delivery failure
        """
        ...
