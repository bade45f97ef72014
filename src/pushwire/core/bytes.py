from __future__ import annotations

import struct


class BytesError(Exception):
    pass


def read_u8(data: bytes, offset: int = 0) -> int:
    if offset < 0 or offset + 1 > len(data):
        raise BytesError("read_u8 out of bounds")
    return data[offset]


def read_u16_be(data: bytes, offset: int = 0) -> int:
    if offset < 0 or offset + 2 > len(data):
        raise BytesError("read_u16_be out of bounds")
    return int(struct.unpack_from(">H", data, offset)[0])


def read_u32_be(data: bytes, offset: int = 0) -> int:
    if offset < 0 or offset + 4 > len(data):
        raise BytesError("read_u32_be out of bounds")
    return int(struct.unpack_from(">I", data, offset)[0])


def write_u8(value: int) -> bytes:
    try:
        return struct.pack(">B", int(value))
    except struct.error as e:
        raise BytesError(f"u8 out of range: {value}") from e


def write_u16_be(value: int) -> bytes:
    try:
        return struct.pack(">H", int(value))
    except struct.error as e:
        raise BytesError(f"u16 out of range: {value}") from e


def write_u32_be(value: int) -> bytes:
    try:
        return struct.pack(">I", int(value))
    except struct.error as e:
        raise BytesError(f"u32 out of range: {value}") from e


def hex_to_bytes(value: str, *, length: int | None = None) -> bytes:
    """
    Strict hex decoding: no whitespace, no 0x prefix.

    bytes.fromhex() tolerates spaces between pairs, which is not acceptable for tokens.
    """

    if not isinstance(value, str) or not value:
        raise BytesError("hex value must be a non-empty string")
    if any(c not in "0123456789abcdefABCDEF" for c in value):
        raise BytesError("hex value contains non-hex characters")
    if len(value) % 2 != 0:
        raise BytesError("hex value must have an even number of characters")
    out = bytes.fromhex(value)
    if length is not None and len(out) != length:
        raise BytesError(f"expected {length} bytes, got {len(out)}")
    return out
