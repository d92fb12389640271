"""IMAP session used to list an account's inbox, built on imap-tools."""

import imaplib
import logging
from enum import Enum
from types import TracebackType

from imap_tools import MailBox
from imap_tools.errors import ImapToolsError, MailboxFetchError, UnexpectedCommandStatusError
from imap_tools.utils import check_command_status

from postkast.accounts.config import AccountConfig, UsernamePassword
from postkast.defaults import FETCH_ITEMS, FETCH_MESSAGE_SET, INBOX_FOLDER
from postkast.email.envelope import parse_fetch_response
from postkast.email.models import FetchedMessage
from postkast.exceptions import ConfigError, ProtocolError

logger = logging.getLogger(__name__)

# Errors raised by imap-tools, imaplib and the socket/TLS layer below them
_SESSION_ERRORS = (ImapToolsError, imaplib.IMAP4.error, OSError)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    MAILBOX_SELECTED = "mailbox_selected"
    DONE = "done"
    FAILED = "failed"


def _is_negative(error: Exception) -> bool:
    """Whether the server rejected the command with a NO response."""
    if not isinstance(error, UnexpectedCommandStatusError):
        return False
    status = error.command_result[0] if error.command_result else None
    if isinstance(status, bytes):
        status = status.decode(errors="replace")
    return status == "NO"


class InboxSession:
    """Sequential IMAP session for one account.

    Steps must run in order: connect, login, select, fetch, logout. Each step that
    fails moves the session to ``FAILED`` and raises ``ConfigError`` or
    ``ProtocolError``.
    """

    def __init__(self, account: AccountConfig) -> None:
        self.account = account
        self.state = SessionState.UNAUTHENTICATED
        self._mailbox: MailBox | None = None

    def _require(self, state: SessionState, step: str) -> MailBox:
        if self._mailbox is None or self.state != state:
            raise RuntimeError(f"Cannot {step} in state '{self.state.value}'")
        return self._mailbox

    def _fail(self, error: Exception) -> Exception:
        self.state = SessionState.FAILED
        self.close()
        return error

    def _protocol_error(self, step: str, error: Exception) -> Exception:
        return self._fail(
            ProtocolError(
                f"{step} failed: {error}",
                account=self.account.name,
                step=step,
                negative=_is_negative(error),
            )
        )

    def connect(self) -> None:
        """Open a TLS connection to the account's IMAP server."""
        if self.state != SessionState.UNAUTHENTICATED or self._mailbox is not None:
            raise RuntimeError("Session already connected")

        imap = self.account.imap
        if imap.tls is None:
            raise self._fail(
                ConfigError(f"No TLS configured for '{self.account.name}'", account=self.account.name)
            )

        logger.debug("Connecting (host=%s, port=%d)", imap.host, imap.effective_port)
        try:
            self._mailbox = MailBox(imap.host, imap.effective_port)
        except _SESSION_ERRORS as e:
            raise self._protocol_error("dial", e) from e

    def login(self) -> None:
        """Authenticate with the account's username and password."""
        mailbox = self._require(SessionState.UNAUTHENTICATED, "login")

        credentials = self.account.credentials
        if not isinstance(credentials, UsernamePassword):
            raise self._fail(
                ConfigError(
                    f"No username and password configured for '{self.account.name}'",
                    account=self.account.name,
                )
            )

        try:
            mailbox.login(
                credentials.username,
                credentials.password.get_secret_value(),
                initial_folder=None,
            )
        except _SESSION_ERRORS as e:
            raise self._protocol_error("login", e) from e
        self.state = SessionState.AUTHENTICATED

    def select(self, folder: str = INBOX_FOLDER) -> None:
        """Select the mailbox to fetch from."""
        mailbox = self._require(SessionState.AUTHENTICATED, "select")
        try:
            mailbox.folder.set(folder)
        except _SESSION_ERRORS as e:
            raise self._protocol_error("select", e) from e
        self.state = SessionState.MAILBOX_SELECTED

    def fetch(
        self,
        message_set: str = FETCH_MESSAGE_SET,
        items: str = FETCH_ITEMS,
    ) -> list[FetchedMessage]:
        """Fetch a range of messages by sequence number.

        Args:
            message_set: Sequence set to fetch (default: the first 100 messages).
            items: FETCH data items; must include ENVELOPE for envelopes to be parsed.

        Returns:
            Fetched messages in server order.
        """
        mailbox = self._require(SessionState.MAILBOX_SELECTED, "fetch")
        try:
            result = mailbox.client.fetch(message_set, items)
            check_command_status(result, MailboxFetchError)
            messages = parse_fetch_response(result[1])
        except (*_SESSION_ERRORS, ValueError) as e:
            raise self._protocol_error("fetch", e) from e
        logger.debug("Fetched %d messages (account=%s)", len(messages), self.account.name)
        return messages

    def logout(self) -> None:
        """Log out and release the connection."""
        mailbox = self._require(SessionState.MAILBOX_SELECTED, "logout")
        try:
            mailbox.logout()
        except _SESSION_ERRORS as e:
            raise self._protocol_error("logout", e) from e
        self._mailbox = None
        self.state = SessionState.DONE

    def close(self) -> None:
        """Drop the connection without logging out."""
        if self._mailbox is None:
            return
        try:
            self._mailbox.client.shutdown()
        except OSError:
            logger.debug("IMAP shutdown failed (connection may already be closed)")
        self._mailbox = None

    def __enter__(self) -> "InboxSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
