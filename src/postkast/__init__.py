"""Print inbox summaries of one or more IMAP accounts."""

from postkast.accounts.config import (
    AccountConfig,
    ImapEndpoint,
    NoCredentials,
    SmtpEndpoint,
    Tls,
    UsernamePassword,
)
from postkast.config import Settings, load_settings
from postkast.email.connectors.imap import InboxSession, SessionState
from postkast.email.models import Address, Envelope, FetchedMessage
from postkast.exceptions import (
    ConfigError,
    EncodingError,
    ErrorKind,
    PostkastError,
    ProtocolError,
)

__version__ = "0.1.0"

__all__ = [
    "AccountConfig",
    "Address",
    "ConfigError",
    "EncodingError",
    "Envelope",
    "ErrorKind",
    "FetchedMessage",
    "ImapEndpoint",
    "InboxSession",
    "NoCredentials",
    "PostkastError",
    "ProtocolError",
    "SessionState",
    "Settings",
    "SmtpEndpoint",
    "Tls",
    "UsernamePassword",
    "load_settings",
]
