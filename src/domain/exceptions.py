"""
Domain exceptions - Semantic error types for account operations.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""

from .otp import OtpCheck


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class InvalidInput(AccountError):
    """Missing or malformed field, weak password, or role-password policy."""

    pass


class DuplicateAccount(AccountError):
    """An account with this email already exists."""

    pass


class AccountNotFound(AccountError):
    """No account matches the given email or id."""

    pass


class InvalidCredentials(AccountError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    pass


class EmailNotVerified(AccountError):
    """Correct credentials but the email has not been verified yet."""

    pass


class VerificationFailed(AccountError):
    """OTP missing, expired, or mismatched."""

    def __init__(self, check: OtpCheck) -> None:
        super().__init__(check.value)
        self.check = check


class MailDeliveryFailure(AccountError):
    """Mail transport failed. Logged by the service, never surfaced."""

    pass
