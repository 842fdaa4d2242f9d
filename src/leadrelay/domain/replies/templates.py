"""Acknowledgment reply content."""

from html import escape
from typing import Optional

from ..mailbox.ports import MessageContent, OutboundMessage

REPLY_TEXT_TEMPLATE = """Thanks for reaching out!

Your assigned agent is {agent_name}.

You can book a time to connect here:
{booking_url}

We'll be in touch soon!
"""

REPLY_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .button {{ display: inline-block; background: #007bff; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin-top: 16px; }}
  </style>
</head>
<body>
  <div class="container">
    <p>Thanks for reaching out!</p>
    <p>Your assigned agent is <strong>{agent_name}</strong>.</p>
    <p><a href="{booking_url}" class="button">Book a Time to Connect</a></p>
    <p>We'll be in touch soon!</p>
  </div>
</body>
</html>
"""


def render_reply_text(agent_name: str, booking_url: str) -> str:
    return REPLY_TEXT_TEMPLATE.format(agent_name=agent_name, booking_url=booking_url)


def render_reply_html(agent_name: str, booking_url: str) -> str:
    return REPLY_HTML_TEMPLATE.format(
        agent_name=escape(agent_name),
        booking_url=escape(booking_url, quote=True),
    )


def build_acknowledgment(
    to: str,
    from_address: str,
    subject: str,
    agent_name: str,
    booking_url: str,
    inbound: Optional[MessageContent] = None,
) -> OutboundMessage:
    """Compose the acknowledgment, threaded onto the inbound message when it has a Message-ID."""
    in_reply_to = None
    references = []

    if inbound is not None and inbound.rfc_message_id:
        in_reply_to = inbound.rfc_message_id
        references = (inbound.references or "").split()
        references.append(inbound.rfc_message_id)

    return OutboundMessage(
        to=to,
        subject=subject,
        text=render_reply_text(agent_name, booking_url),
        html=render_reply_html(agent_name, booking_url),
        from_address=from_address,
        in_reply_to=in_reply_to,
        references=references,
    )
