"""
OTP ledger - issue and validate signup passcodes.

Passcode lifecycle
==================

- issue():    a fresh numeric passcode is stored for the email and mailed
              out. An email may accumulate many records over time.
- validate(): only the newest record for the email can match. Older
              records are superseded the moment a newer one exists.
- consume():  after a successful signup every record for the email is
              marked consumed, which frees its passcode value.

Passcode values are unique across unconsumed records: issue() regenerates
on collision, up to a fixed attempt ceiling.

Concurrent issue() calls for the same email both persist; the last one
written wins. This is eventually consistent with a concurrent validate().
"""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from .boundary import workflow_boundary
from .exceptions import AlreadyRegistered, InternalError, ValidationError
from .notifications import VERIFICATION_SUBJECT, BestEffortNotifier, verification_email
from .ports import IdentityRepository, OTPRepository
from .tokens import utcnow

logger = logging.getLogger(__name__)


class OTPLedger:
    """Issues, stores and validates short-lived numeric passcodes."""

    def __init__(
        self,
        identities: IdentityRepository,
        otps: OTPRepository,
        notifier: BestEffortNotifier,
        *,
        length: int = 6,
        max_attempts: int = 10,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._identities = identities
        self._otps = otps
        self._notifier = notifier
        self._length = length
        self._max_attempts = max_attempts
        self._ttl = ttl
        self._clock = clock

    @workflow_boundary("request-otp")
    def issue(self, email: str) -> str:
        """
        Issue a passcode for an email that has no identity yet.

        Mail delivery is best effort: the record is stored and the passcode
        returned even when the notification fails.

        Raises:
            ValidationError: Email missing
            AlreadyRegistered: An identity already exists for email
            InternalError: No collision-free passcode within the attempt ceiling
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required")

        if self._identities.get_by_email(email) is not None:
            raise AlreadyRegistered(email)

        passcode = self._generate_unique_passcode()
        self._otps.add(email, passcode, self._clock())
        logger.info("OTP issued for %s", email)

        self._notifier.notify(email, VERIFICATION_SUBJECT, verification_email(passcode))
        return passcode

    @workflow_boundary("validate-otp")
    def validate(self, email: str, submitted: str) -> bool:
        """
        Match a submitted passcode against the newest record for email.

        Read-only: a correct passcode keeps validating until it is
        superseded, consumed-and-registered, or (if a TTL is set) expired.
        """
        record = self._otps.latest_for_email(email)
        if record is None:
            return False
        if self._ttl is not None and self._clock() - record.created_at > self._ttl:
            return False
        return secrets.compare_digest(record.passcode.encode(), submitted.encode())

    def consume(self, email: str) -> None:
        self._otps.mark_consumed(email)

    def _generate_unique_passcode(self) -> str:
        for _ in range(self._max_attempts):
            passcode = "".join(secrets.choice("0123456789") for _ in range(self._length))
            if not self._otps.passcode_in_use(passcode):
                return passcode
        logger.error("No unique passcode after %d attempts", self._max_attempts)
        raise InternalError("passcode space exhausted")
