"""Mail server connectors."""

from postkast.email.connectors.imap import InboxSession, SessionState

__all__ = ["InboxSession", "SessionState"]
