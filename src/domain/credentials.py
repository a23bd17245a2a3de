"""
Credential issuer - Password hashing and bearer token minting.

Passwords are hashed with bcrypt (cost factor 10 by default) before they
are first persisted. bcrypt only reads the first 72 bytes of a password,
so longer passwords are refused at registration and never match at login.
Bearer tokens are HS256-signed JWTs carrying the account id as their only
claim besides expiry.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72


def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES


@dataclass(frozen=True)
class PasswordHasher:
    """bcrypt password hashing."""

    cost: int = 10

    def hash(self, plaintext: str) -> str:
        """
        Hash a password.

        Raises:
            ValueError: Password longer than MAX_PASSWORD_BYTES
        """
        if password_too_long(plaintext):
            raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.cost)).decode()

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        bcrypt's comparison is constant-time. A password no stored hash
        could have been made from, or a malformed stored hash, is treated
        as a mismatch.
        """
        if password_too_long(plaintext):
            return False

        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode())
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False


@dataclass(frozen=True)
class TokenIssuer:
    """
    Signed, time-bounded bearer tokens.

    The same secret and algorithm must be used by issue() and verify();
    the HTTP authorization guard relies on verify() rejecting bad
    signatures and expired tokens.
    """

    secret: str
    expires_in: timedelta
    algorithm: str = "HS256"

    def issue(self, account_id: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {"id": account_id, "exp": issued_at + self.expires_in}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str | None:
        """
        Decode a token and return the account id it asserts.

        Returns:
            The account id, or None if the token is malformed, badly
            signed, expired, or carries no id claim
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None

        account_id = claims.get("id")
        if not isinstance(account_id, str) or not account_id:
            return None
        return account_id
