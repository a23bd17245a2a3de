"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .account import Account, NewAccount


class CreateOutcome(Enum):
    """
    Result kind of an account create.

    Adapters translate storage-level unique violations into
    DUPLICATE_EMAIL; the domain never inspects storage error codes.
    """

    CREATED = "created"
    DUPLICATE_EMAIL = "duplicate_email"


@dataclass(frozen=True)
class CreateResult:
    """Outcome of create(), with the stored account when CREATED."""

    outcome: CreateOutcome
    account: Account | None = None


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_email(self, email: str) -> Account | None:
        """
        Look up an account by normalized email.

        Args:
            email: Lowercased, stripped email address

        Returns:
            Account if found, None otherwise
        """
        ...

    def find_by_id(self, account_id: str) -> Account | None:
        """
        Look up an account by id.

        Unknown or malformed ids return None rather than raising.
        """
        ...

    def create(self, new_account: NewAccount) -> CreateResult:
        """
        Insert a new unverified account.

        Never overwrites: if the email is taken the result outcome is
        DUPLICATE_EMAIL and nothing is written.

        Args:
            new_account: Fields for the new record (password already hashed)

        Returns:
            CreateResult with outcome and, on success, the stored Account
        """
        ...

    def save(self, account: Account) -> None:
        """
        Persist the verification fields of an existing account.

        Only is_verified, email_verification_otp and
        email_verification_expires are written. is_verified is never
        written back to False.
        """
        ...


@dataclass(frozen=True)
class VerificationEmail:
    """A verification code addressed to one account."""

    to: str
    name: str
    code: str
    subject: str
    expires_in_minutes: int


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, message: VerificationEmail) -> str | None:
        """
        Send a verification code to an email address.

        Args:
            message: Recipient, code and subject to deliver

        Returns:
            A preview link for the sent message if the transport offers
            one, otherwise None

        Raises:
            MailDeliveryFailure: If the transport rejects or cannot reach
                the mail server
        """
        ...
