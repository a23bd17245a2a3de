"""
OTP issuer - Generation and validation of email verification codes.

Codes are 6-digit numeric strings drawn uniformly from [100000, 999999],
so the leading digit is never 0. Each code expires 15 minutes after
issue by default.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .account import Account

OTP_MIN = 100000
OTP_MAX = 999999
DEFAULT_OTP_TTL = timedelta(minutes=15)


class OtpCheck(Enum):
    """
    Result of checking a supplied OTP against an account snapshot.

    Checks are evaluated in declaration order; the first failing
    check wins.
    """

    NO_OTP_SET = "no_otp_set"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    VALID = "valid"


@dataclass(frozen=True)
class OtpIssuer:
    """Stateless OTP generator and validator."""

    ttl: timedelta = DEFAULT_OTP_TTL

    def generate(self, now: datetime) -> tuple[str, datetime]:
        """
        Generate a fresh code and its expiry.

        The caller persists both values together on the account.

        Args:
            now: Current UTC time

        Returns:
            Tuple of (6-digit code, expiry timestamp)
        """
        code = str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))
        return code, now + self.ttl

    def validate(self, account: "Account", supplied_code: str, now: datetime) -> OtpCheck:
        """
        Judge a supplied code against the account's outstanding OTP.

        An OTP presented exactly at its expiry instant is still valid.
        Comparison is exact (no trimming, no case folding) and constant-time.
        """
        stored_code = account.email_verification_otp
        expires_at = account.email_verification_expires

        if not stored_code or expires_at is None:
            return OtpCheck.NO_OTP_SET

        if now > expires_at:
            return OtpCheck.EXPIRED

        if not secrets.compare_digest(stored_code.encode(), supplied_code.encode()):
            return OtpCheck.MISMATCH

        return OtpCheck.VALID
