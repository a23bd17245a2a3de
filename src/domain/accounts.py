"""
Account domain service - Email verification state machine.

This module contains the core business logic for registration, email
verification by OTP, OTP resend and login.

Verification flow
=================

    register ──> UNVERIFIED(otp, expires) ──verify_email(valid otp)──> VERIFIED
                     │    ^
                     └────┘ resend_otp (fresh otp replaces the old one)

- register: validates input, hashes the password, issues an OTP and
  creates the account unverified. The verification email is best effort.
- verify_email: idempotent once VERIFIED; otherwise the OTP must be
  present, unexpired and equal to the supplied code.
- resend_otp: only while UNVERIFIED; the previous code stops working.
- login: requires a VERIFIED account.

Mail delivery never decides the outcome of an operation: a
MailDeliveryFailure is logged and the already-committed state stands.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

import bcrypt

from .account import Account, NewAccount, Role
from .credentials import MAX_PASSWORD_BYTES, PasswordHasher, TokenIssuer, password_too_long
from .exceptions import (
    AccountNotFound,
    DuplicateAccount,
    EmailNotVerified,
    InvalidCredentials,
    InvalidInput,
    MailDeliveryFailure,
    VerificationFailed,
)
from .otp import OtpCheck, OtpIssuer
from .ports import AccountRepository, CreateOutcome, EmailSender, VerificationEmail

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_NAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 6

REGISTRATION_SUBJECT = "Verify your email - OTP"
RESEND_SUBJECT = "Your new OTP code"

# Compared against when the email is unknown so login timing does not
# reveal whether an account exists.
_DUMMY_PASSWORD_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase."""
    return email.strip().lower()


@dataclass(frozen=True)
class AuthConfig:
    """
    Policy switches for the account service, built once at startup.

    Attributes:
        expose_debug_secrets: Return the raw OTP and mail preview link to
            the caller. Must be False in production.
        teacher_password_prefix: Required password prefix for the teacher
            role. A crude organizational gate, kept as-is.
    """

    expose_debug_secrets: bool = False
    teacher_password_prefix: str = "PDPU"


@dataclass(frozen=True)
class Registration:
    """Input for register()."""

    name: str
    email: str
    password: str
    role: Role | str = Role.STUDENT


@dataclass(frozen=True)
class DebugExtras:
    """Development-only diagnostics returned alongside a sent OTP."""

    otp: str
    preview_url: str | None = None


@dataclass(frozen=True)
class RegistrationResult:
    account: Account
    debug: DebugExtras | None = None


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verify_email(). token/account are None when already verified."""

    already_verified: bool
    token: str | None = None
    account: Account | None = None


@dataclass(frozen=True)
class ResendResult:
    already_verified: bool
    debug: DebugExtras | None = None


@dataclass(frozen=True)
class LoginResult:
    token: str
    account: Account


@dataclass
class AccountService:
    """
    Domain service for account registration, verification and login.

    Orchestrates the account repository, OTP issuer, credential issuers
    and the email sender.
    """

    repository: AccountRepository
    email_sender: EmailSender
    token_issuer: TokenIssuer
    password_hasher: PasswordHasher = field(default_factory=PasswordHasher)
    otp_issuer: OtpIssuer = field(default_factory=OtpIssuer)
    config: AuthConfig = field(default_factory=AuthConfig)
    clock: Callable[[], datetime] = _utcnow

    def register(self, registration: Registration) -> RegistrationResult:
        """
        Create an unverified account and send it a verification code.

        Args:
            registration: Name, email, password and role

        Returns:
            RegistrationResult with the created account, plus the raw OTP
            when debug secrets are exposed

        Raises:
            InvalidInput: Missing/malformed fields or password policy failure
            DuplicateAccount: Email already registered
        """
        name = (registration.name or "").strip()
        email = normalize_email(registration.email or "")
        password = registration.password or ""

        if not name or not email or not password:
            raise InvalidInput("Please provide name, email and password")

        if len(name) > MAX_NAME_LENGTH:
            raise InvalidInput(f"Name cannot be more than {MAX_NAME_LENGTH} characters")

        if not EMAIL_PATTERN.match(email):
            raise InvalidInput("Please provide a valid email address")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if password_too_long(password):
            raise InvalidInput(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

        try:
            role = Role(registration.role or Role.STUDENT)
        except ValueError:
            raise InvalidInput("Role must be either student or teacher") from None

        if self.repository.find_by_email(email) is not None:
            raise DuplicateAccount(email)

        prefix = self.config.teacher_password_prefix
        if role is Role.TEACHER and not password.startswith(prefix):
            raise InvalidInput(f'Teacher password must start with "{prefix}"')

        code, expires_at = self.otp_issuer.generate(self.clock())
        result = self.repository.create(
            NewAccount(
                name=name,
                email=email,
                password_hash=self.password_hasher.hash(password),
                role=role,
                otp=code,
                otp_expires=expires_at,
            )
        )
        if result.outcome is CreateOutcome.DUPLICATE_EMAIL or result.account is None:
            # Lost a race with a concurrent registration for the same email
            raise DuplicateAccount(email)

        account = result.account
        logger.info("Registered account %s (%s)", account.id, account.role.value)

        preview_url = self._send_code(account, code, REGISTRATION_SUBJECT)
        return RegistrationResult(account=account, debug=self._debug_extras(code, preview_url))

    def verify_email(self, email: str, otp: str) -> VerificationResult:
        """
        Verify an account's email with the OTP it was sent.

        Already-verified accounts succeed without checking the OTP.

        Raises:
            InvalidInput: Email or OTP missing
            AccountNotFound: No account for the email
            VerificationFailed: OTP absent, expired or mismatched
        """
        if not email or not email.strip() or not otp:
            raise InvalidInput("Email and OTP are required")

        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFound(normalize_email(email))

        if account.is_verified:
            return VerificationResult(already_verified=True)

        check = self.otp_issuer.validate(account, otp, self.clock())
        if check is not OtpCheck.VALID:
            logger.info("Verification rejected for account %s: %s", account.id, check.value)
            raise VerificationFailed(check)

        account.mark_verified()
        self.repository.save(account)
        logger.info("Account %s verified", account.id)

        return VerificationResult(
            already_verified=False,
            token=self.token_issuer.issue(account.id),
            account=account,
        )

    def resend_otp(self, email: str) -> ResendResult:
        """
        Issue a fresh OTP for an unverified account.

        The previous code is superseded even if it has not expired.

        Raises:
            InvalidInput: Email missing
            AccountNotFound: No account for the email
        """
        if not email or not email.strip():
            raise InvalidInput("Email is required")

        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFound(normalize_email(email))

        if account.is_verified:
            return ResendResult(already_verified=True)

        code, expires_at = self.otp_issuer.generate(self.clock())
        account.issue_otp(code, expires_at)
        self.repository.save(account)

        preview_url = self._send_code(account, code, RESEND_SUBJECT)
        return ResendResult(already_verified=False, debug=self._debug_extras(code, preview_url))

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate a verified account and mint a bearer token.

        Unknown email and wrong password both raise InvalidCredentials.
        A correct password on an unverified account raises
        EmailNotVerified instead, which does confirm the account exists.

        Raises:
            InvalidInput: Email or password missing
            InvalidCredentials: Unknown email or wrong password
            EmailNotVerified: Credentials valid but email not verified
        """
        if not email or not email.strip() or not password:
            raise InvalidInput("Please provide email and password")

        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            self.password_hasher.verify(password, _DUMMY_PASSWORD_HASH)
            raise InvalidCredentials()

        if not self.password_hasher.verify(password, account.password_hash):
            raise InvalidCredentials()

        if not account.is_verified:
            raise EmailNotVerified(account.email)

        return LoginResult(token=self.token_issuer.issue(account.id), account=account)

    def get_account(self, account_id: str) -> Account:
        """
        Load an account by id.

        Raises:
            AccountNotFound: No account with this id
        """
        account = self.repository.find_by_id(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    def _send_code(self, account: Account, code: str, subject: str) -> str | None:
        """Send the code once; delivery failure is logged and swallowed."""
        message = VerificationEmail(
            to=account.email,
            name=account.name,
            code=code,
            subject=subject,
            expires_in_minutes=int(self.otp_issuer.ttl.total_seconds() // 60),
        )
        try:
            return self.email_sender.send_verification_code(message)
        except MailDeliveryFailure:
            logger.warning("Verification email for account %s was not delivered", account.id, exc_info=True)
            return None

    def _debug_extras(self, code: str, preview_url: str | None) -> DebugExtras | None:
        if not self.config.expose_debug_secrets:
            return None
        return DebugExtras(otp=code, preview_url=preview_url)
