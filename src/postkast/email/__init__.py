"""IMAP session handling and envelope rendering."""

from postkast.email.envelope import parse_fetch_response, render_address, render_message
from postkast.email.models import Address, Envelope, FetchedMessage

__all__ = [
    "Address",
    "Envelope",
    "FetchedMessage",
    "parse_fetch_response",
    "render_address",
    "render_message",
]
