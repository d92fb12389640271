"""Custom exceptions for postkast.

Every failure reported back to the per-account loop belongs to one of three kinds,
see :class:`ErrorKind`.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed taxonomy of failures surfaced to the caller."""

    CONFIGURATION = "configuration"
    PROTOCOL = "protocol"
    ENCODING = "encoding"


class PostkastError(Exception):
    """Base exception for postkast."""

    kind: ErrorKind

    def __init__(self, message: str, account: str | None = None) -> None:
        self.message = message
        self.account = account
        super().__init__(message)


class ConfigError(PostkastError):
    """Raised when settings cannot be loaded or are incomplete for a connection."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
        col: int | None = None,
        account: str | None = None,
    ) -> None:
        self.file_path = file_path
        self.line = line
        self.col = col
        full_message = message
        if file_path:
            location = f" in {file_path}"
            if line is not None:
                location += f" at line {line}"
                if col is not None:
                    location += f", column {col}"
            full_message = f"Configuration error{location}: {message}"
        super().__init__(full_message, account=account)


class ProtocolError(PostkastError):
    """Raised when the IMAP session fails after a connection attempt was made.

    ``negative`` is set when the server answered a command with ``NO``. Callers treat
    that case as fatal to the whole run.
    """

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        account: str | None = None,
        step: str | None = None,
        negative: bool = False,
    ) -> None:
        self.step = step
        self.negative = negative
        super().__init__(message, account=account)


class EncodingError(PostkastError):
    """Raised when envelope text cannot be decoded as UTF-8.

    Envelope rendering currently falls back to ``NIL`` instead of raising this.
    """

    kind = ErrorKind.ENCODING
