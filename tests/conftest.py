"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repositories
- A recording mail sender
- Low-cost password hashing and a controllable clock
- Fully wired domain services
"""

from datetime import datetime, timedelta, timezone

import pytest

from studyauth.adapters.repository.memory import InMemoryIdentityRepository, InMemoryOTPRepository
from studyauth.domain.access import AccessGate
from studyauth.domain.account import AccountService
from studyauth.domain.login import LoginService
from studyauth.domain.notifications import BestEffortNotifier
from studyauth.domain.otp import OTPLedger
from studyauth.domain.passwords import PasswordHasher
from studyauth.domain.registration import RegistrationService, SignupForm
from studyauth.domain.tokens import SessionTokenIssuer

TEST_SECRET = "test-secret"


class RecordingEmailSender:
    """EmailSender that keeps every message; optionally fails on send."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []

    def send(self, email: str, subject: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append((email, subject, body))


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_form(
    email: str = "a@x.com",
    password: str = "right-password",
    account_type: str = "Student",
    **overrides: str,
) -> SignupForm:
    fields = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": email,
        "password": password,
        "confirm_password": password,
        "account_type": account_type,
    }
    fields.update(overrides)
    return SignupForm(**fields)


@pytest.fixture
def identities() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def otps() -> InMemoryOTPRepository:
    return InMemoryOTPRepository()


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt at its minimum cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer(clock: FakeClock) -> SessionTokenIssuer:
    return SessionTokenIssuer(TEST_SECRET, clock=clock)


@pytest.fixture
def ledger(identities, otps, sender, clock) -> OTPLedger:
    return OTPLedger(identities, otps, BestEffortNotifier(sender), clock=clock)


@pytest.fixture
def registration(identities, ledger, hasher) -> RegistrationService:
    return RegistrationService(identities=identities, otp_ledger=ledger, hasher=hasher)


@pytest.fixture
def login_service(identities, hasher, token_issuer) -> LoginService:
    return LoginService(identities=identities, hasher=hasher, token_issuer=token_issuer)


@pytest.fixture
def account_service(identities, hasher, sender) -> AccountService:
    return AccountService(identities=identities, hasher=hasher, notifier=BestEffortNotifier(sender))


@pytest.fixture
def gate(identities, token_issuer) -> AccessGate:
    return AccessGate(identities=identities, token_issuer=token_issuer)


@pytest.fixture
def form_factory():
    """Build SignupForm values; keyword overrides replace single fields."""
    return make_form


@pytest.fixture
def failing_sender() -> RecordingEmailSender:
    return RecordingEmailSender(fail=True)
