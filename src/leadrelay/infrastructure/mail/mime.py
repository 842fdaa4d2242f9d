"""RFC 822 parsing and composition for the mail adapters.

Inbound: raw bytes -> MessageContent (text/plain and text/html bodies plus the
headers needed for threading). Outbound: OutboundMessage -> EmailMessage with
In-Reply-To/References when replying in-thread.
"""

import email
import email.policy
import logging
from email.message import EmailMessage, Message
from email.utils import make_msgid, parsedate_to_datetime
from typing import Optional, Tuple

from ...domain.mailbox.ports import MailTransportError, MessageContent, OutboundMessage

logger = logging.getLogger(__name__)


def parse_mime_message(raw_mime: bytes) -> Message:
    """Parse raw MIME bytes into an email.message.EmailMessage.

    Raises:
        MailTransportError: If the bytes cannot be parsed
    """
    try:
        return email.message_from_bytes(raw_mime, policy=email.policy.default)
    except Exception as e:
        logger.error(f"Failed to parse MIME message: {e}")
        raise MailTransportError(f"Invalid MIME message: {e}") from e


def extract_bodies(msg: Message) -> Tuple[Optional[str], Optional[str]]:
    """Return the first non-attachment (text/plain, text/html) bodies."""
    text_body = None
    html_body = None

    for part in msg.walk():
        if part.get_content_maintype() == 'multipart':
            continue
        if part.get_content_disposition() == 'attachment':
            continue

        content_type = part.get_content_type()
        if content_type not in ('text/plain', 'text/html'):
            continue

        try:
            content = part.get_content()
        except (LookupError, UnicodeDecodeError):
            # Unknown or lying charset declaration
            payload = part.get_payload(decode=True) or b""
            content = payload.decode('utf-8', errors='replace')

        if content_type == 'text/plain' and text_body is None:
            text_body = content
        elif content_type == 'text/html' and html_body is None:
            html_body = content

    return text_body or None, html_body or None


def _parse_date(value: Optional[str]):
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable Date header: {value}")
        return None


def to_message_content(message_id: str, raw_mime: bytes) -> MessageContent:
    """Decode raw message bytes fetched for message_id."""
    msg = parse_mime_message(raw_mime)
    text_body, html_body = extract_bodies(msg)

    return MessageContent(
        message_id=message_id,
        text=text_body,
        html=html_body,
        subject=str(msg.get('Subject', '') or ''),
        from_address=str(msg['From']) if msg['From'] else None,
        to_address=str(msg['To']) if msg['To'] else None,
        date=_parse_date(msg.get('Date')),
        rfc_message_id=str(msg['Message-ID']).strip() if msg['Message-ID'] else None,
        references=str(msg['References']).strip() if msg['References'] else None,
    )


def compose_message(outbound: OutboundMessage, domain: Optional[str] = None) -> EmailMessage:
    """Build an RFC 822 message; multipart/alternative when an HTML body is given."""
    msg = EmailMessage()
    msg['From'] = outbound.from_address
    msg['To'] = outbound.to
    msg['Subject'] = outbound.subject
    msg['Message-ID'] = make_msgid(domain=domain)

    if outbound.in_reply_to:
        msg['In-Reply-To'] = outbound.in_reply_to
        references = list(outbound.references) or [outbound.in_reply_to]
        if outbound.in_reply_to not in references:
            references.append(outbound.in_reply_to)
        msg['References'] = " ".join(references)

    msg.set_content(outbound.text)
    if outbound.html:
        msg.add_alternative(outbound.html, subtype='html')

    return msg
