"""Session identifier rendering."""

import binascii
from base64 import b64decode, b64encode, urlsafe_b64decode
from uuid import UUID


def format_session_id(session_id: bytes) -> str:
    """Render a session id: 16-byte ids as a GUID, anything else as base64."""
    if len(session_id) == 16:
        return str(UUID(bytes=session_id))
    return b64encode(session_id).decode("ascii")


def parse_session_id(value: str) -> bytes | None:
    """Inverse of ``format_session_id``; also accepts base64url.

    Returns:
        The raw session id, or None if the value is not a GUID or base64
    """
    try:
        return UUID(value).bytes
    except ValueError:
        pass
    padded = value + "=" * (-len(value) % 4)
    try:
        return b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        pass
    try:
        return urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        return None
