"""Data models for fetched IMAP messages.

Envelope fields hold the raw bytes sent by the server; decoding happens when the
envelope is rendered.
"""

from pydantic import BaseModel


class Address(BaseModel):
    """Envelope address: display name, source route (ADL), mailbox and host."""

    name: bytes | None = None
    adl: bytes | None = None
    mailbox: bytes | None = None
    host: bytes | None = None


class Envelope(BaseModel):
    """Structured header summary of a message as returned by FETCH ENVELOPE."""

    date: bytes | None = None
    subject: bytes | None = None
    from_: list[Address] | None = None
    sender: list[Address] | None = None
    reply_to: list[Address] | None = None
    to: list[Address] | None = None
    cc: list[Address] | None = None
    bcc: list[Address] | None = None
    in_reply_to: bytes | None = None
    message_id: bytes | None = None


class FetchedMessage(BaseModel):
    """One message of a FETCH response, identified by its sequence number."""

    seq: int
    envelope: Envelope | None = None
