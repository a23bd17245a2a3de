"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory account store
- A controllable clock
- A recording email sender
- A fully wired AccountService
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.domain.accounts import AccountService, AuthConfig
from src.domain.credentials import PasswordHasher, TokenIssuer
from src.domain.exceptions import MailDeliveryFailure
from src.domain.otp import OtpIssuer
from src.domain.ports import VerificationEmail

TEST_JWT_SECRET = "test-secret"
# Low bcrypt cost keeps the suite fast; production cost is covered in test_credentials
TEST_BCRYPT_COST = 4


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingEmailSender:
    """EmailSender that records messages and can simulate transport failure."""

    def __init__(self, preview_url: str | None = None) -> None:
        self.messages: list[VerificationEmail] = []
        self.preview_url = preview_url
        self.fail = False

    def send_verification_code(self, message: VerificationEmail) -> str | None:
        if self.fail:
            raise MailDeliveryFailure(f"delivery to {message.to} failed")
        self.messages.append(message)
        return self.preview_url

    @property
    def last_code(self) -> str:
        return self.messages[-1].code


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_JWT_SECRET, expires_in=timedelta(hours=1))


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    email_sender: RecordingEmailSender,
    token_issuer: TokenIssuer,
    clock: FixedClock,
) -> AccountService:
    """AccountService over the in-memory store with debug secrets exposed."""
    return AccountService(
        repository=repository,
        email_sender=email_sender,
        token_issuer=token_issuer,
        password_hasher=PasswordHasher(cost=TEST_BCRYPT_COST),
        otp_issuer=OtpIssuer(),
        config=AuthConfig(expose_debug_secrets=True),
        clock=clock,
    )
