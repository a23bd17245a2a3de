"""
Shared fixtures for adversarial tests.

Provides a thread-safe account service over the in-memory store.
"""

from datetime import timedelta

import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.smtp.console import ConsoleEmailSender
from src.domain.accounts import AccountService, AuthConfig
from src.domain.credentials import PasswordHasher, TokenIssuer

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def service(repository: InMemoryAccountRepository) -> AccountService:
    return AccountService(
        repository=repository,
        email_sender=ConsoleEmailSender(),
        token_issuer=TokenIssuer(secret="adversarial", expires_in=timedelta(hours=1)),
        password_hasher=PasswordHasher(cost=4),
        config=AuthConfig(expose_debug_secrets=True),
    )
