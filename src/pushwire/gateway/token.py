from __future__ import annotations

import re

from pushwire.core.bytes import BytesError, hex_to_bytes

TOKEN_SIZE = 32
TOKEN_HEX_LENGTH = TOKEN_SIZE * 2

_TOKEN_RE = re.compile(r"[0-9A-Fa-f]{64}")


class TokenError(Exception):
    pass


def supports(token: object) -> bool:
    """
    Capability check used to route a device to this gateway.

    True iff the token is exactly 64 hexadecimal characters.
    """

    return isinstance(token, str) and _TOKEN_RE.fullmatch(token) is not None


def decode_token(token: str) -> bytes:
    try:
        return hex_to_bytes(token, length=TOKEN_SIZE)
    except BytesError as e:
        raise TokenError(f"Invalid device token {token!r}: {e}") from e
