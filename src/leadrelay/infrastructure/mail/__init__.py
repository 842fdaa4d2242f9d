"""Mail transport adapters (IMAP inbound, SMTP outbound)."""

from .imap_mailbox import ImapMailbox
from .smtp_sender import SmtpSender

__all__ = ["ImapMailbox", "SmtpSender"]
