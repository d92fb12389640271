"""Per-account inbox listing and the run loop over all configured accounts."""

import logging
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import structlog

from postkast.accounts.config import AccountConfig
from postkast.config import Settings
from postkast.email.connectors.imap import InboxSession
from postkast.email.envelope import SEPARATOR, render_messages
from postkast.exceptions import ErrorKind, PostkastError, ProtocolError

# Events go through stdlib logging so they never mix with envelopes on stdout
logger = structlog.wrap_logger(logging.getLogger(__name__))

DONE_MARKER = "Done."


class Disposition(str, Enum):
    """What the run loop does after an account has been processed."""

    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class InboxResult:
    """Outcome of listing one account's inbox."""

    account: str
    error: PostkastError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Diagnostic label and disposition per error kind. A negative server response is
# the one protocol failure that aborts the run, see classify().
_DISPATCH: dict[ErrorKind, tuple[str, Disposition]] = {
    ErrorKind.CONFIGURATION: ("CONFIG", Disposition.CONTINUE),
    ErrorKind.PROTOCOL: ("IMAP", Disposition.CONTINUE),
    ErrorKind.ENCODING: ("ENCODING", Disposition.CONTINUE),
}


def classify(result: InboxResult) -> Disposition:
    """Decide whether processing continues after ``result``."""
    if result.error is None:
        return Disposition.CONTINUE
    if isinstance(result.error, ProtocolError) and result.error.negative:
        return Disposition.ABORT
    return _DISPATCH[result.error.kind][1]


def describe(result: InboxResult) -> str:
    """Human-readable diagnostic line for a failed result."""
    if result.error is None:
        return f"{result.account}: ok"
    label = _DISPATCH[result.error.kind][0]
    return f"{label}: {result.account}: {result.error}"


def _write_lines(out: TextIO, lines: Iterable[str]) -> None:
    for line in lines:
        out.write(line + "\n")
    out.flush()


def list_inbox(account: AccountConfig, out: TextIO | None = None) -> InboxResult:
    """Print the inbox envelopes of one account.

    Envelopes are written before logging out. A failed logout is reported but the
    printed output stands.
    """
    if out is None:
        out = sys.stdout
    log = logger.bind(account=account.name)

    with InboxSession(account) as session:
        try:
            session.connect()
            session.login()
            session.select()
            messages = session.fetch()
            _write_lines(out, render_messages(messages))
            session.logout()
        except PostkastError as e:
            log.debug("Account failed", kind=e.kind.value, state=session.state.value)
            return InboxResult(account=account.name, error=e)

    log.debug("Account listed", messages=len(messages))
    return InboxResult(account=account.name)


def run(
    settings: Settings,
    out: TextIO | None = None,
    err: TextIO | None = None,
    lister: Callable[[AccountConfig, TextIO], InboxResult] = list_inbox,
) -> int:
    """List every configured account in order.

    Envelopes go to ``out`` and one diagnostic line per failed account to ``err``.
    Log events go through :mod:`logging` only.

    Returns:
        Process exit status: 0, or 1 if a negative server response stopped the run.
    """
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr

    for account in settings.servers:
        result = lister(account, out)
        if result.ok:
            _write_lines(out, [SEPARATOR, DONE_MARKER])
            continue

        _write_lines(err, [describe(result)])
        if classify(result) is Disposition.ABORT:
            logger.error("Server rejected a command, stopping", account=result.account)
            return 1
        logger.debug("Skipping account", account=result.account, kind=result.error.kind.value)

    return 0
