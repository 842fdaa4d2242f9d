"""SMTP outbound adapter for acknowledgment replies."""

import logging
import smtplib
from typing import Optional

from ...domain.mailbox.ports import MailTransportError, OutboundMailPort, OutboundMessage
from .mime import compose_message

logger = logging.getLogger(__name__)


class SmtpSender(OutboundMailPort):
    """OutboundMailPort over smtplib. Returns the composed Message-ID as delivery id."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, message: OutboundMessage) -> str:
        sender_domain = message.from_address.rsplit("@", 1)[-1].strip("> ") if "@" in message.from_address else None
        msg = compose_message(message, domain=sender_domain)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailTransportError(f"SMTP delivery to {message.to} failed: {e}") from e

        delivery_id = msg['Message-ID']
        logger.info(f"Email sent to {message.to}, message id {delivery_id}")
        return delivery_id
