"""IMAP mailbox adapter.

Candidates are UNSEEN messages (optionally narrowed by extra search
criteria), addressed by UID so ids stay stable across sessions. Fetching uses
BODY.PEEK[] so reading a message does not mark it seen; acknowledging sets
\\Seen explicitly.
"""

import imaplib
import logging
from typing import List, Optional

from ...domain.mailbox.ports import MailboxPort, MailTransportError, MessageContent, MessageRef
from .mime import to_message_content

logger = logging.getLogger(__name__)


class ImapMailbox(MailboxPort):
    """MailboxPort over imaplib. Opens one connection per operation."""

    def __init__(
        self,
        host: str,
        port: int = 993,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = True,
        folder: str = "INBOX",
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.folder = folder
        self.timeout = timeout

    def _connect(self, readonly: bool = True) -> imaplib.IMAP4:
        """Open, log in and select the folder. A half-open connection is logged out before raising."""
        try:
            if self.use_ssl:
                conn = imaplib.IMAP4_SSL(self.host, self.port, timeout=self.timeout)
            else:
                conn = imaplib.IMAP4(self.host, self.port, timeout=self.timeout)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailTransportError(f"IMAP connection to {self.host}:{self.port} failed: {e}") from e

        try:
            if self.username:
                conn.login(self.username, self.password or "")
            status, _ = conn.select(self.folder, readonly=readonly)
        except (imaplib.IMAP4.error, OSError) as e:
            self._close(conn)
            raise MailTransportError(f"IMAP connection to {self.host}:{self.port} failed: {e}") from e

        if status != "OK":
            self._close(conn)
            raise MailTransportError(f"Cannot select folder {self.folder}")
        return conn

    @staticmethod
    def _close(conn: imaplib.IMAP4) -> None:
        try:
            conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"IMAP logout failed: {e}")

    def list_candidate_messages(self, query: Optional[str], limit: int) -> List[MessageRef]:
        criteria = "UNSEEN"
        if query:
            criteria = f"({criteria} {query})"

        conn = self._connect(readonly=True)
        try:
            status, data = conn.uid("SEARCH", None, criteria)
            if status != "OK":
                raise MailTransportError(f"IMAP search failed: {data}")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailTransportError(f"IMAP search failed: {e}") from e
        finally:
            self._close(conn)

        uids = data[0].split() if data and data[0] else []
        refs = [MessageRef(id=uid.decode()) for uid in uids[:limit]]
        logger.info(f"Found {len(uids)} unseen messages, returning {len(refs)}")
        return refs

    def fetch_full_content(self, message_id: str) -> MessageContent:
        conn = self._connect(readonly=True)
        try:
            status, data = conn.uid("FETCH", message_id, "(BODY.PEEK[])")
            if status != "OK":
                raise MailTransportError(f"IMAP fetch of {message_id} failed: {data}")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailTransportError(f"IMAP fetch of {message_id} failed: {e}") from e
        finally:
            self._close(conn)

        raw_mime = None
        for item in data or []:
            if isinstance(item, tuple) and len(item) == 2:
                raw_mime = item[1]
                break

        if not raw_mime:
            raise MailTransportError(f"No raw payload returned for message {message_id}")

        return to_message_content(message_id, raw_mime)

    def acknowledge(self, message_id: str) -> None:
        conn = self._connect(readonly=False)
        try:
            status, data = conn.uid("STORE", message_id, "+FLAGS", "(\\Seen)")
            if status != "OK":
                raise MailTransportError(f"IMAP flag update of {message_id} failed: {data}")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailTransportError(f"IMAP flag update of {message_id} failed: {e}") from e
        finally:
            self._close(conn)
