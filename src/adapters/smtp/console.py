"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging verification codes to stdout for development.
"""

import logging

from src.domain.ports import VerificationEmail

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Selected when no SMTP host is configured.
    """

    def send_verification_code(self, message: VerificationEmail) -> str | None:
        """
        Log verification code to console (simulates email delivery).

        The code is logged at INFO level to be visible in server logs.

        Args:
            message: Recipient and code (email normalized by domain layer)

        Returns:
            None - the console has no preview link
        """
        logger.info("[VERIFICATION] Email: %s Code: %s", message.to, message.code)
        return None
