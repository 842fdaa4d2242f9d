"""Mailbox and outbound mail ports.

MailboxPort is the inbound side (list, fetch, acknowledge); OutboundMailPort
sends acknowledgment replies. Adapters live in infrastructure.mail.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from leadrelay.exceptions import LeadRelayError


class MailTransportError(LeadRelayError):
    """Mailbox or outbound transport failed (fetch, send or acknowledge)."""
    pass


class ReplyDispatchError(LeadRelayError):
    """Acknowledgment reply could not be composed or sent."""
    pass


@dataclass
class MessageRef:
    """Candidate message returned by a mailbox listing."""
    id: str


@dataclass
class MessageContent:
    """Full content of one inbound message.

    Attributes:
        message_id: Mailbox id the content was fetched for
        text: text/plain body (None if absent)
        html: text/html body (None if absent)
        subject: Subject header ("" if absent)
        from_address: From header
        to_address: To header
        date: Parsed Date header
        rfc_message_id: RFC 5322 Message-ID header, used for reply threading
        references: References header of the inbound message
    """
    message_id: str
    text: Optional[str] = None
    html: Optional[str] = None
    subject: str = ""
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    date: Optional[datetime] = None
    rfc_message_id: Optional[str] = None
    references: Optional[str] = None


@dataclass
class OutboundMessage:
    """Message to send. in_reply_to/references thread it onto an inbound message."""
    to: str
    subject: str
    text: str
    from_address: str
    html: Optional[str] = None
    in_reply_to: Optional[str] = None
    references: List[str] = field(default_factory=list)


class MailboxPort(ABC):
    """Port interface for the inbound mailbox."""

    @abstractmethod
    def list_candidate_messages(self, query: Optional[str], limit: int) -> List[MessageRef]:
        """List unread messages matching query, at most limit.

        Raises:
            MailTransportError: If the mailbox cannot be queried
        """
        pass

    @abstractmethod
    def fetch_full_content(self, message_id: str) -> MessageContent:
        """Fetch and decode one message.

        Raises:
            MailTransportError: If the transport fails or returns no content
        """
        pass

    @abstractmethod
    def acknowledge(self, message_id: str) -> None:
        """Mark the message as handled (read) so it is no longer a candidate.

        Raises:
            MailTransportError: If the flag update fails
        """
        pass


class OutboundMailPort(ABC):
    """Port interface for sending mail."""

    @abstractmethod
    def send(self, message: OutboundMessage) -> str:
        """Send a message and return the transport's delivery id.

        Raises:
            MailTransportError: If delivery fails
        """
        pass
