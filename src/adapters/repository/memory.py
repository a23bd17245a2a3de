"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local storage for development and tests. Accounts are copied on
the way in and out, so callers only change stored state through save().
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.account import Account, NewAccount
from src.domain.ports import CreateOutcome, CreateResult


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a lock-guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[str, Account] = {}
        self._ids_by_email: dict[str, str] = {}

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._ids_by_email.get(email)
            if account_id is None:
                return None
            return replace(self._accounts[account_id])

    def find_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account is not None else None

    def create(self, new_account: NewAccount) -> CreateResult:
        with self._lock:
            if new_account.email in self._ids_by_email:
                return CreateResult(outcome=CreateOutcome.DUPLICATE_EMAIL)

            account = Account(
                id=str(uuid.uuid4()),
                name=new_account.name,
                email=new_account.email,
                password_hash=new_account.password_hash,
                role=new_account.role,
                is_verified=False,
                email_verification_otp=new_account.otp,
                email_verification_expires=new_account.otp_expires,
                created_at=datetime.now(timezone.utc),
            )
            self._accounts[account.id] = account
            self._ids_by_email[account.email] = account.id
            return CreateResult(outcome=CreateOutcome.CREATED, account=replace(account))

    def save(self, account: Account) -> None:
        """Persist verification fields; a verified record never reverts."""
        with self._lock:
            stored = self._accounts.get(account.id)
            if stored is None:
                return

            if stored.is_verified or account.is_verified:
                stored.mark_verified()
            else:
                stored.issue_otp(account.email_verification_otp, account.email_verification_expires)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
