"""
API v1 routes.

Defines REST endpoints for OTP-gated registration, login, password change
and the current-account lookup. Domain errors raised here are turned into
HTTP responses by the handlers in studyauth.api.errors.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Response, status

from studyauth.api.dependencies import (
    get_account_service,
    get_current_claims,
    get_login_service,
    get_otp_ledger,
    get_registration_service,
    get_settings_from_app,
)
from studyauth.api.models import (
    AccountResponse,
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SendOTPRequest,
    SignupRequest,
    SignupResponse,
)
from studyauth.config.settings import Settings
from studyauth.domain.account import AccountService
from studyauth.domain.login import LoginService
from studyauth.domain.otp import OTPLedger
from studyauth.domain.registration import RegistrationService, SignupForm
from studyauth.domain.tokens import TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_UNAUTHENTICATED = {401: {"model": ErrorResponse, "description": "Missing or invalid token"}}


@router.post(
    "/sendotp",
    response_model=MessageResponse,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
    },
    summary="Request a signup passcode",
    description="Issue a 6-digit passcode for an unregistered email and send it by mail.",
)
def send_otp(
    request_data: SendOTPRequest,
    ledger: OTPLedger = Depends(get_otp_ledger),
) -> MessageResponse:
    ledger.issue(request_data.email)
    return MessageResponse(message="OTP sent successfully")


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid OTP"},
        409: {"model": ErrorResponse, "description": "User already exists"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Create an account. The otp field must hold the newest passcode "
    "issued to the email.",
)
def signup(
    request_data: SignupRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> SignupResponse:
    form = SignupForm(
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        email=request_data.email,
        password=request_data.password,
        confirm_password=request_data.confirm_password,
        account_type=request_data.account_type,
        contact_number=request_data.contact_number,
    )
    account = service.signup(form, request_data.otp)
    return SignupResponse(
        message="User registered successfully",
        user=AccountResponse.from_account(account),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Incorrect password"},
        404: {"model": ErrorResponse, "description": "User not found"},
        422: {"description": "Validation error"},
    },
    summary="Log in",
    description="Verify credentials and issue a 24-hour session token, "
    "returned in the body and as an HTTP-only cookie.",
)
def login(
    request_data: LoginRequest,
    response: Response,
    service: LoginService = Depends(get_login_service),
    settings: Settings = Depends(get_settings_from_app),
) -> LoginResponse:
    result = service.login(request_data.email, request_data.password)

    # Cookie lifetime is transport only; the token's own exp still governs validity
    max_age = int(timedelta(days=settings.cookie_max_age_days).total_seconds())
    response.set_cookie(
        key=settings.cookie_name,
        value=result.token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return LoginResponse(
        message="User login successful",
        token=result.token,
        expires_at=result.expires_at,
        user=AccountResponse.from_account(result.account),
    )


@router.post(
    "/changepassword",
    response_model=MessageResponse,
    responses={**_UNAUTHENTICATED, 422: {"description": "Validation error"}},
    summary="Change password",
    description="Replace the caller's password after checking the old one.",
)
def change_password(
    request_data: ChangePasswordRequest,
    claims: TokenClaims = Depends(get_current_claims),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.change_password(claims.id, request_data.old_password, request_data.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get(
    "/me",
    response_model=AccountResponse,
    responses=_UNAUTHENTICATED,
    summary="Current account",
)
def me(
    claims: TokenClaims = Depends(get_current_claims),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.from_account(service.current_account(claims.id))
