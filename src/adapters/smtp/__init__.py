"""Email sender adapters."""

from .console import ConsoleEmailSender
from .outbox import OutboxEmailSender
from .sender import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "OutboxEmailSender", "SmtpEmailSender"]
