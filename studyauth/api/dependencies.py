"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into routes, plus the authentication and
role-authorization dependencies that guard protected routes.
"""

import json
from collections.abc import Callable
from datetime import timedelta

from fastapi import Depends, Request

from studyauth.config.settings import Settings
from studyauth.domain.access import AccessGate
from studyauth.domain.account import AccountService
from studyauth.domain.login import LoginService
from studyauth.domain.notifications import BestEffortNotifier
from studyauth.domain.otp import OTPLedger
from studyauth.domain.passwords import PasswordHasher
from studyauth.domain.ports import Account, EmailSender, IdentityRepository, OTPRepository, Role
from studyauth.domain.registration import RegistrationService
from studyauth.domain.tokens import SessionTokenIssuer, TokenClaims


def get_settings_from_app(request: Request) -> Settings:
    """Settings the app was built with (stored in app state at startup)."""
    return request.app.state.settings


def get_identity_repository(request: Request) -> IdentityRepository:
    return request.app.state.identities


def get_otp_repository(request: Request) -> OTPRepository:
    return request.app.state.otps


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_password_hasher(settings: Settings = Depends(get_settings_from_app)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_cost)


def get_token_issuer(settings: Settings = Depends(get_settings_from_app)) -> SessionTokenIssuer:
    return SessionTokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(hours=settings.token_ttl_hours),
    )


def get_notifier(sender: EmailSender = Depends(get_email_sender)) -> BestEffortNotifier:
    return BestEffortNotifier(sender)


def get_otp_ledger(
    settings: Settings = Depends(get_settings_from_app),
    identities: IdentityRepository = Depends(get_identity_repository),
    otps: OTPRepository = Depends(get_otp_repository),
    notifier: BestEffortNotifier = Depends(get_notifier),
) -> OTPLedger:
    ttl = timedelta(seconds=settings.otp_ttl_seconds) if settings.otp_ttl_seconds is not None else None
    return OTPLedger(
        identities,
        otps,
        notifier,
        length=settings.otp_length,
        max_attempts=settings.otp_max_generation_attempts,
        ttl=ttl,
    )


def get_registration_service(
    identities: IdentityRepository = Depends(get_identity_repository),
    otp_ledger: OTPLedger = Depends(get_otp_ledger),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> RegistrationService:
    """Wires together the repository, OTP ledger and hasher for signup."""
    return RegistrationService(identities=identities, otp_ledger=otp_ledger, hasher=hasher)


def get_login_service(
    identities: IdentityRepository = Depends(get_identity_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    token_issuer: SessionTokenIssuer = Depends(get_token_issuer),
) -> LoginService:
    return LoginService(identities=identities, hasher=hasher, token_issuer=token_issuer)


def get_account_service(
    identities: IdentityRepository = Depends(get_identity_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    notifier: BestEffortNotifier = Depends(get_notifier),
) -> AccountService:
    return AccountService(identities=identities, hasher=hasher, notifier=notifier)


def get_access_gate(
    identities: IdentityRepository = Depends(get_identity_repository),
    token_issuer: SessionTokenIssuer = Depends(get_token_issuer),
) -> AccessGate:
    return AccessGate(identities=identities, token_issuer=token_issuer)


async def extract_token(request: Request, cookie_name: str = "token") -> str | None:
    """
    Find the bearer token on a request.

    Precedence: cookie, then a "token" field in a JSON body, then an
    "Authorization: Bearer" header.
    """
    token = request.cookies.get(cookie_name)
    if token:
        return token

    if "application/json" in request.headers.get("content-type", ""):
        try:
            body = json.loads(await request.body() or b"null")
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("token"), str) and body["token"]:
            return body["token"]

    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_claims(
    request: Request,
    settings: Settings = Depends(get_settings_from_app),
    gate: AccessGate = Depends(get_access_gate),
) -> TokenClaims:
    """
    Authenticate the request.

    Verified claims are also attached to request.state.user for handlers
    that read the request directly.
    """
    token = await extract_token(request, settings.cookie_name)
    claims = gate.authenticate(token)
    request.state.user = claims
    return claims


def require_role(role: Role) -> Callable[..., Account]:
    """
    Build a dependency that admits only callers whose stored role is role.

    Authentication runs first, so an expired token is reported as
    Unauthenticated before any role check.
    """

    def dependency(
        claims: TokenClaims = Depends(get_current_claims),
        gate: AccessGate = Depends(get_access_gate),
    ) -> Account:
        return gate.authorize(claims, role)

    dependency.__name__ = f"require_{role.value.lower()}"
    return dependency


require_student = require_role(Role.STUDENT)
require_instructor = require_role(Role.INSTRUCTOR)
require_admin = require_role(Role.ADMIN)
