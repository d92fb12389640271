"""Parsing and rendering of FETCH envelopes.

Rendered addresses use the envelope notation of RFC 3501: each of the four
sub-fields is either a quoted string or ``NIL``.
"""

import logging
from collections.abc import Sequence
from typing import Any

from imapclient.response_parser import parse_response

from postkast.email.models import Address, Envelope, FetchedMessage

logger = logging.getLogger(__name__)

NIL = "NIL"
SEPARATOR = "---"

_ADDRESS_FIELDS: tuple[tuple[str, str], ...] = (
    ("From", "from_"),
    ("To", "to"),
    ("Cc", "cc"),
    ("Bcc", "bcc"),
)


def _as_bytes(value: Any) -> bytes | None:
    if isinstance(value, bytes):
        return value
    if isinstance(value, int):
        return str(value).encode()
    return None


def _convert_addresses(raw: Any) -> list[Address] | None:
    if not raw:
        return None
    addresses = []
    for item in raw:
        if not isinstance(item, tuple) or len(item) != 4:
            raise ValueError(f"Malformed envelope address: {item!r}")
        name, adl, mailbox, host = (_as_bytes(part) for part in item)
        addresses.append(Address(name=name, adl=adl, mailbox=mailbox, host=host))
    return addresses


def _convert_envelope(raw: Any) -> Envelope:
    if not isinstance(raw, tuple) or len(raw) != 10:
        raise ValueError(f"Malformed ENVELOPE: {raw!r}")
    date, subject, from_, sender, reply_to, to, cc, bcc, in_reply_to, message_id = raw
    return Envelope(
        date=_as_bytes(date),
        subject=_as_bytes(subject),
        from_=_convert_addresses(from_),
        sender=_convert_addresses(sender),
        reply_to=_convert_addresses(reply_to),
        to=_convert_addresses(to),
        cc=_convert_addresses(cc),
        bcc=_convert_addresses(bcc),
        in_reply_to=_as_bytes(in_reply_to),
        message_id=_as_bytes(message_id),
    )


def parse_fetch_response(data: Sequence[Any]) -> list[FetchedMessage]:
    """Parse the untagged FETCH data returned by ``imaplib`` into messages.

    Args:
        data: Response items as returned by ``IMAP4.fetch`` (bytes lines and
            ``(header, literal)`` tuples).

    Returns:
        Messages in server order. Messages fetched without ENVELOPE have no envelope.

    Raises:
        ValueError: If the response does not have the FETCH shape.
    """
    chunks = [chunk for chunk in data if chunk is not None]
    if not chunks:
        return []

    parsed = parse_response(chunks)
    if len(parsed) % 2:
        raise ValueError("Unexpected FETCH response: odd number of items")

    messages = []
    for seq, attributes in zip(parsed[::2], parsed[1::2]):
        if not isinstance(seq, int) or not isinstance(attributes, tuple):
            raise ValueError(f"Unexpected FETCH response item: {seq!r}")
        values = dict(zip(attributes[::2], attributes[1::2]))
        raw_envelope = values.get(b"ENVELOPE")
        envelope = _convert_envelope(raw_envelope) if raw_envelope is not None else None
        messages.append(FetchedMessage(seq=seq, envelope=envelope))
    return messages


def _decode(value: bytes | None) -> str | None:
    """Decode a field as UTF-8, treating undecodable bytes as absent."""
    if value is None:
        return None
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Dropping undecodable envelope field (value=%r)", value)
        return None


def _quote(value: bytes | None) -> str:
    text = _decode(value)
    if text is None:
        return NIL
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_address(address: Address) -> str:
    """Render an address as ``(name adl mailbox host)``."""
    parts = (address.name, address.adl, address.mailbox, address.host)
    return "(" + " ".join(_quote(part) for part in parts) + ")"


def render_message(message: FetchedMessage) -> list[str]:
    """Render the envelope of one message as printable lines.

    Messages without an envelope produce no lines.
    """
    envelope = message.envelope
    if envelope is None:
        return []

    lines = [SEPARATOR]
    for label, attr in _ADDRESS_FIELDS:
        addresses = getattr(envelope, attr)
        if addresses:
            lines.append(f"{label}: " + ", ".join(render_address(a) for a in addresses))

    date = _decode(envelope.date)
    if date is not None:
        lines.append(f"Date: {date}")
    subject = _decode(envelope.subject)
    if subject is not None:
        lines.append(f"Subject: {subject}")
    return lines


def render_messages(messages: Sequence[FetchedMessage]) -> list[str]:
    """Render all messages of a batch in order."""
    lines: list[str] = []
    for message in messages:
        lines.extend(render_message(message))
    return lines
