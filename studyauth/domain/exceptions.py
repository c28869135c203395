"""
Domain exceptions - Semantic error types for identity and access control.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Security-boundary failures carry no detail that reaches the client;
the HTTP layer replaces them with fixed generic messages.
"""


class IdentityError(Exception):
    """Base class for identity domain errors."""

    pass


class ValidationError(IdentityError):
    """Missing or malformed input. The client must correct and resubmit."""

    pass


class AlreadyRegistered(IdentityError):
    """An OTP was requested for an email that already has an identity."""

    pass


class Conflict(IdentityError):
    """Signup for an email that already has an identity."""

    pass


class InvalidOTP(IdentityError):
    """Submitted passcode is absent, superseded, expired or wrong."""

    pass


class InvalidToken(IdentityError):
    """Session token is malformed, expired or carries a bad signature."""

    pass


class Unauthorized(IdentityError):
    """Credentials were presented but did not match."""

    pass


class Unauthenticated(IdentityError):
    """No usable session token accompanied the request."""

    pass


class Forbidden(IdentityError):
    """Authenticated caller does not hold the required role."""

    pass


class NotFound(IdentityError):
    """Requested identity does not exist."""

    pass


class InternalError(IdentityError):
    """Unexpected collaborator failure, detail logged server-side only."""

    pass


class ServiceUnavailable(IdentityError):
    """A collaborator did not answer within its time bound."""

    pass


class StoreUnavailable(Exception):
    """
    Raised by storage adapters when the store cannot be reached in time.

    Not an IdentityError: workflow boundaries translate it into
    ServiceUnavailable before it reaches a caller.
    """

    pass
