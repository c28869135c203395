"""
Unit tests for SessionTokenIssuer.

Tests verify:
- issue/verify round trip within the validity window
- 24-hour expiry measured against the injected clock
- Every failure mode collapses to InvalidToken
"""

from datetime import timedelta

import pytest
from jose import jwt

from studyauth.domain.exceptions import InvalidToken
from studyauth.domain.ports import Role
from studyauth.domain.tokens import SessionTokenIssuer, TokenClaims

CLAIMS = TokenClaims(email="a@x.com", id="0b6c5b0e-1111-4a8e-9d3a-000000000001", role=Role.STUDENT)


class TestIssue:
    """Tests for issue()."""

    def test_expires_24_hours_after_issue(self, token_issuer, clock) -> None:
        issued = token_issuer.issue(CLAIMS)
        assert issued.expires_at == clock.now + timedelta(hours=24)

    def test_payload_carries_claims_and_expiry(self, token_issuer, clock) -> None:
        issued = token_issuer.issue(CLAIMS)
        payload = jwt.get_unverified_claims(issued.token)

        assert payload["email"] == "a@x.com"
        assert payload["id"] == CLAIMS.id
        assert payload["role"] == "Student"
        assert payload["exp"] == int((clock.now + timedelta(hours=24)).timestamp())
        assert "password" not in payload

    def test_fresh_token_each_issue(self, token_issuer, clock) -> None:
        first = token_issuer.issue(CLAIMS)
        clock.advance(seconds=1)
        second = token_issuer.issue(CLAIMS)
        assert first.token != second.token

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            SessionTokenIssuer("")


class TestVerify:
    """Tests for verify()."""

    @pytest.mark.parametrize("role", list(Role))
    def test_round_trip(self, token_issuer, role: Role) -> None:
        claims = TokenClaims(email="r@x.com", id="42", role=role)
        assert token_issuer.verify(token_issuer.issue(claims).token) == claims

    def test_valid_just_before_expiry(self, token_issuer, clock) -> None:
        token = token_issuer.issue(CLAIMS).token
        clock.advance(hours=23, minutes=59)
        assert token_issuer.verify(token) == CLAIMS

    def test_expired_token_rejected(self, token_issuer, clock) -> None:
        token = token_issuer.issue(CLAIMS).token
        clock.advance(hours=24, seconds=1)
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_wrong_secret_rejected(self, token_issuer, clock) -> None:
        other = SessionTokenIssuer("another-secret", clock=clock)
        with pytest.raises(InvalidToken):
            token_issuer.verify(other.issue(CLAIMS).token)

    def test_tampered_payload_rejected(self, token_issuer) -> None:
        header, payload, signature = token_issuer.issue(CLAIMS).token.split(".")
        forged = jwt.encode({"email": "a@x.com", "id": CLAIMS.id, "role": "Admin", "exp": 2**31}, "x")
        forged_payload = forged.split(".")[1]
        with pytest.raises(InvalidToken):
            token_issuer.verify(f"{header}.{forged_payload}.{signature}")

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
    def test_malformed_token_rejected(self, token_issuer, token: str) -> None:
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_other_algorithm_rejected(self, token_issuer, clock) -> None:
        """Only the configured algorithm is accepted, even with the right secret."""
        exp = int((clock.now + timedelta(hours=1)).timestamp())
        token = jwt.encode(
            {"email": "a@x.com", "id": "1", "role": "Admin", "exp": exp}, "test-secret", algorithm="HS512"
        )
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_unknown_role_rejected(self, token_issuer, clock) -> None:
        exp = int((clock.now + timedelta(hours=1)).timestamp())
        token = jwt.encode({"email": "a@x.com", "id": "1", "role": "Root", "exp": exp}, "test-secret")
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_missing_expiry_rejected(self, token_issuer) -> None:
        token = jwt.encode({"email": "a@x.com", "id": "1", "role": "Student"}, "test-secret")
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_all_failures_are_the_same_exception(self, token_issuer, clock) -> None:
        """Callers cannot tell expired from badly signed."""
        expired = token_issuer.issue(CLAIMS).token
        clock.advance(days=2)
        bad_signature = SessionTokenIssuer("other", clock=clock).issue(CLAIMS).token

        errors = []
        for token in (expired, bad_signature, "garbage"):
            with pytest.raises(InvalidToken) as exc_info:
                token_issuer.verify(token)
            errors.append((type(exc_info.value), str(exc_info.value)))
        assert len(set(errors)) == 1
