"""Mail transport ports."""

from .ports import (
    MailboxPort,
    MailTransportError,
    MessageContent,
    MessageRef,
    OutboundMailPort,
    OutboundMessage,
    ReplyDispatchError,
)

__all__ = [
    "MailboxPort",
    "MailTransportError",
    "MessageContent",
    "MessageRef",
    "OutboundMailPort",
    "OutboundMessage",
    "ReplyDispatchError",
]
