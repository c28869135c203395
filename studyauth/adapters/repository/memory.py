"""
In-memory repository adapters - Implement the identity and OTP ports.

Lock-protected dictionaries with the same observable semantics as the
PostgreSQL adapters. Used for local development (storage_backend=memory)
and tests. State lives only as long as the process.
"""

import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime

from studyauth.domain.ports import IdentityRecord, NewIdentity, OTPRecord, Role


@dataclass
class Profile:
    """Empty-at-signup profile, referenced by the identity."""

    id: str
    gender: str | None = None
    date_of_birth: str | None = None
    about: str | None = None
    contact_number: str | None = None


class InMemoryIdentityRepository:
    """Implements IdentityRepository protocol with process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, IdentityRecord] = {}
        self._id_by_email: dict[str, str] = {}
        self.profiles: dict[str, Profile] = {}

    def get_by_email(self, email: str) -> IdentityRecord | None:
        with self._lock:
            identity_id = self._id_by_email.get(email)
            return self._by_id.get(identity_id) if identity_id else None

    def get_by_id(self, identity_id: str) -> IdentityRecord | None:
        with self._lock:
            return self._by_id.get(identity_id)

    def create_with_profile(self, identity: NewIdentity) -> IdentityRecord | None:
        with self._lock:
            if identity.email in self._id_by_email:
                return None
            profile = Profile(id=str(uuid.uuid4()))
            record = IdentityRecord(
                id=str(uuid.uuid4()),
                email=identity.email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                password_hash=identity.password_hash,
                role=identity.role,
                approved=identity.approved,
                profile_id=profile.id,
                contact_number=identity.contact_number,
                image="",
            )
            self.profiles[profile.id] = profile
            self._by_id[record.id] = record
            self._id_by_email[record.email] = record.id
            return record

    def update_password(self, identity_id: str, password_hash: str) -> IdentityRecord | None:
        with self._lock:
            record = self._by_id.get(identity_id)
            if record is None:
                return None
            updated = replace(record, password_hash=password_hash)
            self._by_id[identity_id] = updated
            return updated

    def set_role(self, identity_id: str, role: Role) -> None:
        """Administrative role change (not part of the identity port)."""
        with self._lock:
            self._by_id[identity_id] = replace(self._by_id[identity_id], role=role)


@dataclass
class _StoredOTP:
    record: OTPRecord
    sequence: int
    consumed: bool = False


class InMemoryOTPRepository:
    """Implements OTPRepository protocol with process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[_StoredOTP] = []

    def add(self, email: str, passcode: str, created_at: datetime) -> OTPRecord:
        record = OTPRecord(email=email, passcode=passcode, created_at=created_at)
        with self._lock:
            self._records.append(_StoredOTP(record=record, sequence=len(self._records)))
        return record

    def latest_for_email(self, email: str) -> OTPRecord | None:
        with self._lock:
            matching = [stored for stored in self._records if stored.record.email == email]
        if not matching:
            return None
        newest = max(matching, key=lambda stored: (stored.record.created_at, stored.sequence))
        return newest.record

    def passcode_in_use(self, passcode: str) -> bool:
        with self._lock:
            return any(
                not stored.consumed and stored.record.passcode == passcode
                for stored in self._records
            )

    def mark_consumed(self, email: str) -> None:
        with self._lock:
            for stored in self._records:
                if stored.record.email == email:
                    stored.consumed = True
