"""
Outbox email sender adapter - Implements EmailSender protocol.

Development transport: each verification mail is rendered to an HTML file
in a local outbox directory instead of being delivered, and the file's
``file://`` URI is returned as the preview link. Nothing leaves the host.
"""

import html
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from src.adapters.smtp.sender import render_verification_html
from src.domain.exceptions import MailDeliveryFailure
from src.domain.ports import VerificationEmail

logger = logging.getLogger(__name__)


class OutboxEmailSender:
    """
    Implements EmailSender protocol by writing mail to a directory.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Selected when no SMTP host is configured and MAIL_OUTBOX_DIR is set.
    """

    def __init__(self, directory: str | Path, sender: str = "no-reply@example.com") -> None:
        self._directory = Path(directory)
        self._sender = sender

    def send_verification_code(self, message: VerificationEmail) -> str | None:
        """
        Write the rendered mail to the outbox.

        Returns:
            ``file://`` URI of the written message

        Raises:
            MailDeliveryFailure: The outbox could not be written
        """
        sent_at = datetime.now(timezone.utc)
        path = self._directory / f"{sent_at:%Y%m%dT%H%M%S}-{uuid.uuid4().hex[:12]}.html"

        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(self._render(message, sent_at), encoding="utf-8")
        except OSError as e:
            raise MailDeliveryFailure(f"Could not write mail for {message.to} to {self._directory}") from e

        preview_url = path.resolve().as_uri()
        logger.info("[VERIFICATION] Email: %s Code: %s Preview: %s", message.to, message.code, preview_url)
        return preview_url

    def _render(self, message: VerificationEmail, sent_at: datetime) -> str:
        return (
            "<!DOCTYPE html>\n"
            f"<html><head><meta charset=\"utf-8\"><title>{html.escape(message.subject)}</title></head>\n"
            "<body>\n"
            f"<p><b>From:</b> {html.escape(self._sender)}<br>\n"
            f"<b>To:</b> {html.escape(message.to)}<br>\n"
            f"<b>Subject:</b> {html.escape(message.subject)}<br>\n"
            f"<b>Date:</b> {sent_at.isoformat()}</p>\n"
            "<hr>\n"
            f"{render_verification_html(message)}\n"
            "</body></html>\n"
        )
