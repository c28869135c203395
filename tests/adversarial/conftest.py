"""
Shared fixtures for adversarial tests.

The domain services from the root conftest run against the thread-safe
in-memory store, so concurrency and guessing attacks need no database.
"""

import pytest

from studyauth.domain.ports import Account
from studyauth.domain.registration import RegistrationService


@pytest.fixture
def registered(registration: RegistrationService, ledger, form_factory):
    """Register an identity through the real OTP flow and return its Account."""

    def _register(email: str = "victim@x.com", account_type: str = "Student") -> Account:
        passcode = ledger.issue(email)
        return registration.signup(form_factory(email=email, account_type=account_type), passcode)

    return _register
