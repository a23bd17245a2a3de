"""
Domain layer - Pure business logic with zero web or database framework imports.

This package contains the core business logic for account registration,
email verification by OTP and login. It defines its own port interfaces
for infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .account import Account, NewAccount, Role
from .accounts import AccountService, AuthConfig, Registration
from .credentials import PasswordHasher, TokenIssuer
from .exceptions import (
    AccountError,
    AccountNotFound,
    DuplicateAccount,
    EmailNotVerified,
    InvalidCredentials,
    InvalidInput,
    MailDeliveryFailure,
    VerificationFailed,
)
from .otp import OtpCheck, OtpIssuer
from .ports import AccountRepository, CreateOutcome, CreateResult, EmailSender, VerificationEmail

__all__ = [
    "Account",
    "AccountError",
    "AccountNotFound",
    "AccountRepository",
    "AccountService",
    "AuthConfig",
    "CreateOutcome",
    "CreateResult",
    "DuplicateAccount",
    "EmailNotVerified",
    "EmailSender",
    "InvalidCredentials",
    "InvalidInput",
    "MailDeliveryFailure",
    "NewAccount",
    "OtpCheck",
    "OtpIssuer",
    "PasswordHasher",
    "Registration",
    "Role",
    "TokenIssuer",
    "VerificationEmail",
    "VerificationFailed",
]
