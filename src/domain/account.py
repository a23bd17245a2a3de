"""
Account model - Persisted record of a user and its verification state.

Verification State Machine (Forward-Only)
=========================================

States:
- UNVERIFIED: Initial state after registration (OTP and expiry populated)
- VERIFIED: Terminal state after a valid OTP was presented (OTP cleared)

Valid Transitions:
    UNVERIFIED -> UNVERIFIED  (resend: fresh OTP replaces the old one)
    UNVERIFIED -> VERIFIED    (valid OTP)

Invalid Transitions (never allowed):
    VERIFIED -> any           (VERIFIED is terminal)

The OTP code and its expiry are always set or cleared together.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Account roles."""

    STUDENT = "student"
    TEACHER = "teacher"


@dataclass
class NewAccount:
    """Fields required to create an unverified account."""

    name: str
    email: str
    password_hash: str
    role: Role
    otp: str
    otp_expires: datetime


@dataclass
class Account:
    """
    A stored account.

    Mutate verification fields only through issue_otp() and mark_verified()
    so the OTP pairing and forward-only invariants hold.
    """

    id: str
    name: str
    email: str
    password_hash: str
    role: Role = Role.STUDENT
    is_verified: bool = False
    email_verification_otp: str | None = None
    email_verification_expires: datetime | None = None
    created_at: datetime | None = None

    def issue_otp(self, code: str, expires_at: datetime) -> None:
        """
        Replace the outstanding OTP (last write wins).

        Raises:
            ValueError: If the account is already verified
        """
        if self.is_verified:
            raise ValueError("Cannot issue an OTP for a verified account")
        self.email_verification_otp = code
        self.email_verification_expires = expires_at

    def mark_verified(self) -> None:
        """Transition to VERIFIED and clear the OTP pair."""
        self.is_verified = True
        self.email_verification_otp = None
        self.email_verification_expires = None
