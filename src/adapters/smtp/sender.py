"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers verification codes as HTML mail through any SMTP relay
(STARTTLS on port 587 by default). One attempt per call, no retries.
"""

import html
import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import MailDeliveryFailure
from src.domain.ports import VerificationEmail

logger = logging.getLogger(__name__)


def render_verification_html(message: VerificationEmail) -> str:
    """Render the HTML body for a verification code."""
    return (
        f"<p>Hi {html.escape(message.name)},</p>\n"
        f"<p>Your verification code is:</p>\n"
        f'<h2 style="letter-spacing:4px">{message.code}</h2>\n'
        f"<p>This code expires in {message.expires_in_minutes} minutes.</p>"
    )


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
        sender: str = "no-reply@example.com",
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout
        self._sender = sender

    def send_verification_code(self, message: VerificationEmail) -> str | None:
        """
        Send the verification code.

        Returns:
            None - plain SMTP relays offer no preview link

        Raises:
            MailDeliveryFailure: On any SMTP or network error
        """
        mail = EmailMessage()
        mail["From"] = self._sender
        mail["To"] = message.to
        mail["Subject"] = message.subject
        mail.set_content(f"Your verification code is {message.code}")
        mail.add_alternative(render_verification_html(message), subtype="html")

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(mail)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryFailure(f"SMTP delivery to {message.to} failed") from e

        logger.info("Verification email sent to %s via %s:%s", message.to, self._host, self._port)
        return None
