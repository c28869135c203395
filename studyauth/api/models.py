"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase; Python attributes are snake_case.
"""

from datetime import datetime
from typing import Annotated

from email_validator import validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from studyauth.domain.ports import Account, Role


def _checked_email(value: str) -> str:
    # Syntax check only; the submitted spelling stays the identity key
    value = value.strip()
    validate_email(value, check_deliverability=False)
    return value


Email = Annotated[str, AfterValidator(_checked_email), Field(json_schema_extra={"format": "email"})]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendOTPRequest(CamelModel):
    """Request model for OTP issuance."""

    email: Email


class SignupRequest(CamelModel):
    """Request model for OTP-gated registration."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Email
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")
    confirm_password: str = Field(..., min_length=8)
    account_type: Role
    contact_number: str | None = Field(default=None, max_length=32)
    otp: str = Field(
        ...,
        pattern=r"^\d+$",
        max_length=32,
        description="Numeric passcode sent to the email address",
    )


class LoginRequest(CamelModel):
    """Request model for credential login."""

    email: Email
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    """Request model for password change."""

    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, description="New password (min 8 characters)")


class AccountResponse(CamelModel):
    """Account payload. Never carries credential material."""

    id: str
    email: str
    first_name: str
    last_name: str
    account_type: Role
    approved: bool
    profile_id: str | None = None
    contact_number: str | None = None
    image: str = ""

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            account_type=account.role,
            approved=account.approved,
            profile_id=account.profile_id,
            contact_number=account.contact_number,
            image=account.image,
        )


class MessageResponse(BaseModel):
    """Plain confirmation."""

    message: str


class SignupResponse(CamelModel):
    """Response model for successful registration."""

    message: str
    user: AccountResponse


class LoginResponse(CamelModel):
    """Response model for successful login."""

    message: str
    token: str
    expires_at: datetime
    user: AccountResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
