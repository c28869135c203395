"""
Unit tests for RegistrationService domain logic.

Tests the signup workflow against in-memory repositories:
- Field validation before any store access
- Conflict, InvalidOTP ordering
- Password hashing and approval flag
- Atomic profile + identity creation
- Collaborator failure translation
"""

import re
from unittest.mock import Mock

import pytest

from studyauth.domain.exceptions import (
    Conflict,
    InternalError,
    InvalidOTP,
    ServiceUnavailable,
    StoreUnavailable,
    ValidationError,
)
from studyauth.domain.ports import Account, Role
from studyauth.domain.registration import RegistrationService


class TestSignupSuccess:
    """Tests for the happy path."""

    def test_signup_with_latest_otp_succeeds(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(), otp)

        assert isinstance(account, Account)
        assert account.email == "a@x.com"
        assert account.first_name == "Ada"
        assert account.role is Role.STUDENT

    def test_result_has_no_password_digest(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(), otp)

        assert not hasattr(account, "password_hash")
        assert "$2" not in repr(account)

    def test_password_stored_as_bcrypt(self, registration, ledger, identities, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        registration.signup(form_factory(password="right-password"), otp)

        stored = identities.get_by_email("a@x.com").password_hash
        assert stored != "right-password"
        assert re.match(r"^\$2[aby]\$", stored)

    def test_profile_created_and_referenced(
        self, registration, ledger, identities, form_factory
    ) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(), otp)

        profile = identities.profiles[account.profile_id]
        assert (profile.gender, profile.date_of_birth, profile.about, profile.contact_number) == (
            None,
            None,
            None,
            None,
        )

    def test_avatar_empty_and_contact_number_kept(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(contact_number="+1 555 0100"), otp)

        assert account.image == ""
        assert account.contact_number == "+1 555 0100"

    def test_otps_consumed_after_signup(self, registration, ledger, otps, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        registration.signup(form_factory(), otp)
        assert not otps.passcode_in_use(otp)


class TestApprovalFlag:
    """Instructors start unapproved; everyone else is approved."""

    @pytest.mark.parametrize(
        ("account_type", "approved"),
        [("Instructor", False), ("Student", True), ("Admin", True)],
    )
    def test_approval_by_role(
        self, registration, ledger, form_factory, account_type: str, approved: bool
    ) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(account_type=account_type), otp)
        assert account.approved is approved

    def test_role_enum_accepted(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        account = registration.signup(form_factory(account_type=Role.INSTRUCTOR), otp)
        assert account.role is Role.INSTRUCTOR
        assert account.approved is False


class TestSignupValidation:
    """Tests for input validation (step 1)."""

    @pytest.mark.parametrize(
        "field",
        ["first_name", "last_name", "email", "password", "confirm_password", "account_type"],
    )
    def test_missing_field_rejected(self, registration, ledger, form_factory, field: str) -> None:
        otp = ledger.issue("a@x.com")
        with pytest.raises(ValidationError, match="All fields are required"):
            registration.signup(form_factory(**{field: ""}), otp)

    def test_missing_otp_rejected(self, registration, form_factory) -> None:
        with pytest.raises(ValidationError):
            registration.signup(form_factory(), "")

    def test_password_mismatch_rejected(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        with pytest.raises(ValidationError, match="do not match"):
            registration.signup(form_factory(confirm_password="something-else"), otp)

    def test_unknown_account_type_rejected(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        with pytest.raises(ValidationError):
            registration.signup(form_factory(account_type="Janitor"), otp)

    def test_overlong_password_rejected(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        with pytest.raises(ValidationError):
            registration.signup(form_factory(password="p" * 73), otp)

    def test_validation_happens_before_store_access(self, form_factory) -> None:
        identities = Mock()
        service = RegistrationService(identities=identities, otp_ledger=Mock(), hasher=Mock())

        with pytest.raises(ValidationError):
            service.signup(form_factory(first_name=""), "123456")

        identities.get_by_email.assert_not_called()
        identities.create_with_profile.assert_not_called()


class TestSignupConflicts:
    """Tests for Conflict and InvalidOTP outcomes."""

    def test_second_signup_same_email_conflicts(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        registration.signup(form_factory(), otp)

        with pytest.raises(Conflict):
            registration.signup(form_factory(), otp)

    def test_conflict_checked_before_otp(self, registration, ledger, form_factory) -> None:
        otp = ledger.issue("a@x.com")
        registration.signup(form_factory(), otp)

        with pytest.raises(Conflict):
            registration.signup(form_factory(), "999999")

    def test_unissued_otp_rejected(self, registration, ledger, form_factory, identities) -> None:
        issued = ledger.issue("a@x.com")
        wrong = "000000" if issued != "000000" else "111111"

        with pytest.raises(InvalidOTP):
            registration.signup(form_factory(), wrong)
        assert identities.get_by_email("a@x.com") is None

    def test_no_otp_requested_rejected(self, registration, form_factory) -> None:
        with pytest.raises(InvalidOTP):
            registration.signup(form_factory(), "123456")

    def test_superseded_otp_rejected(self, registration, ledger, form_factory, clock) -> None:
        older = ledger.issue("a@x.com")
        clock.advance(seconds=30)
        newer = ledger.issue("a@x.com")
        if older == newer:
            pytest.skip("passcodes collided")

        with pytest.raises(InvalidOTP):
            registration.signup(form_factory(), older)
        assert registration.signup(form_factory(), newer).email == "a@x.com"

    def test_lost_creation_race_is_conflict(self, ledger, hasher, form_factory) -> None:
        """Repository reports the email taken between the check and the insert."""
        identities = Mock()
        identities.get_by_email.return_value = None
        identities.create_with_profile.return_value = None
        otp_ledger = Mock()
        otp_ledger.validate.return_value = True
        service = RegistrationService(identities=identities, otp_ledger=otp_ledger, hasher=hasher)

        with pytest.raises(Conflict):
            service.signup(form_factory(), "123456")
        otp_ledger.consume.assert_not_called()


class TestCollaboratorFailures:
    """Store failures are translated at the workflow boundary."""

    def test_store_timeout_is_service_unavailable(self, hasher, form_factory) -> None:
        identities = Mock()
        identities.get_by_email.side_effect = StoreUnavailable("PoolTimeout")
        service = RegistrationService(identities=identities, otp_ledger=Mock(), hasher=hasher)

        with pytest.raises(ServiceUnavailable):
            service.signup(form_factory(), "123456")

    def test_unexpected_error_is_internal_error(self, hasher, form_factory, caplog) -> None:
        identities = Mock()
        identities.get_by_email.return_value = None
        identities.create_with_profile.side_effect = RuntimeError("disk on fire")
        otp_ledger = Mock()
        otp_ledger.validate.return_value = True
        service = RegistrationService(identities=identities, otp_ledger=otp_ledger, hasher=hasher)

        with pytest.raises(InternalError) as exc_info:
            service.signup(form_factory(), "123456")

        assert "disk on fire" not in str(exc_info.value)
        assert exc_info.value.__cause__ is None
        assert "disk on fire" in caplog.text

    def test_consume_failure_still_returns_account(
        self, identities, hasher, form_factory, caplog
    ) -> None:
        otp_ledger = Mock()
        otp_ledger.validate.return_value = True
        otp_ledger.consume.side_effect = StoreUnavailable("PoolTimeout")
        service = RegistrationService(identities=identities, otp_ledger=otp_ledger, hasher=hasher)

        account = service.signup(form_factory(), "123456")

        assert account.email == "a@x.com"
        assert identities.get_by_email("a@x.com") is not None
        assert "Could not mark OTPs consumed" in caplog.text
