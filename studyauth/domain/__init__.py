"""
Domain layer - Pure business logic with zero framework imports.

This package contains the identity and access-control core: OTP-gated
registration, credential login, session tokens and role authorization.
It defines its own port interfaces for infrastructure abstraction.
"""

from .access import AccessGate
from .account import AccountService
from .exceptions import (
    AlreadyRegistered,
    Conflict,
    Forbidden,
    IdentityError,
    InternalError,
    InvalidOTP,
    InvalidToken,
    NotFound,
    ServiceUnavailable,
    StoreUnavailable,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from .login import LoginResult, LoginService
from .notifications import BestEffortNotifier
from .otp import OTPLedger
from .passwords import PasswordHasher
from .ports import (
    Account,
    EmailSender,
    IdentityRecord,
    IdentityRepository,
    NewIdentity,
    OTPRecord,
    OTPRepository,
    Role,
)
from .registration import RegistrationService, SignupForm
from .tokens import IssuedToken, SessionTokenIssuer, TokenClaims

__all__ = [
    "AccessGate",
    "Account",
    "AccountService",
    "AlreadyRegistered",
    "BestEffortNotifier",
    "Conflict",
    "EmailSender",
    "Forbidden",
    "IdentityError",
    "IdentityRecord",
    "IdentityRepository",
    "InternalError",
    "InvalidOTP",
    "InvalidToken",
    "IssuedToken",
    "LoginResult",
    "LoginService",
    "NewIdentity",
    "NotFound",
    "OTPLedger",
    "OTPRecord",
    "OTPRepository",
    "PasswordHasher",
    "RegistrationService",
    "Role",
    "ServiceUnavailable",
    "SessionTokenIssuer",
    "SignupForm",
    "StoreUnavailable",
    "TokenClaims",
    "Unauthenticated",
    "Unauthorized",
    "ValidationError",
]
