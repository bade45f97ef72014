from __future__ import annotations

import time
from dataclasses import dataclass

from pushwire.core.bytes import (
    BytesError,
    read_u8,
    read_u16_be,
    read_u32_be,
    write_u8,
    write_u16_be,
    write_u32_be,
)

from .identifiers import random_identifier
from .payload import NotificationPayload
from .token import TOKEN_SIZE, TokenError, decode_token

COMMAND_NOTIFICATION = 2

ITEM_DEVICE_TOKEN = 1
ITEM_PAYLOAD = 2
ITEM_IDENTIFIER = 3
ITEM_EXPIRY = 4
ITEM_PRIORITY = 5

DEFAULT_EXPIRY_SECONDS = 86400
PRIORITY_IMMEDIATE = 10
PRIORITY_CONSERVE_POWER = 5

MAX_ITEM_LENGTH = 0xFFFF

_HEADER_LEN = 1 + 4
_ITEM_HEADER_LEN = 1 + 2


class EncodingError(Exception):
    pass


def _item(item_id: int, value: bytes) -> bytes:
    if len(value) > MAX_ITEM_LENGTH:
        raise EncodingError(f"Item {item_id} too large: {len(value)} bytes")
    return write_u8(item_id) + write_u16_be(len(value)) + value


@dataclass(frozen=True, slots=True)
class NotificationFrame:
    """
    Binary notification (command 2).

    Layout:
    - command: 1 byte (2)
    - frame length: 4 bytes big-endian, length of all items below
    - items, each (id: 1 byte, length: 2 bytes big-endian, value):
      1 device token (32 bytes), 2 payload JSON, 3 identifier (4 bytes),
      4 expiry unix time (4 bytes), 5 priority (1 byte)
    """

    token: bytes
    payload: bytes
    identifier: int
    expiry: int
    priority: int = PRIORITY_IMMEDIATE

    def items(self) -> bytes:
        if len(self.token) != TOKEN_SIZE:
            raise EncodingError(f"Device token must be {TOKEN_SIZE} bytes")
        try:
            return (
                _item(ITEM_DEVICE_TOKEN, self.token)
                + _item(ITEM_PAYLOAD, self.payload)
                + _item(ITEM_IDENTIFIER, write_u32_be(self.identifier))
                + _item(ITEM_EXPIRY, write_u32_be(self.expiry))
                + _item(ITEM_PRIORITY, write_u8(self.priority))
            )
        except BytesError as e:
            raise EncodingError(str(e)) from e

    def pack(self) -> bytes:
        body = self.items()
        return write_u8(COMMAND_NOTIFICATION) + write_u32_be(len(body)) + body


def encode_notification(
    token: str,
    payload: NotificationPayload | bytes,
    *,
    identifier: int | None = None,
    expiry: int | None = None,
    expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
    priority: int = PRIORITY_IMMEDIATE,
    now: float | None = None,
) -> NotificationFrame:
    try:
        raw_token = decode_token(token)
    except TokenError as e:
        raise EncodingError(str(e)) from e

    body = payload.to_json() if isinstance(payload, NotificationPayload) else bytes(payload)
    if identifier is None:
        identifier = random_identifier()
    if expiry is None:
        ts = time.time() if now is None else now
        expiry = int(ts) + int(expiry_seconds)

    return NotificationFrame(
        token=raw_token,
        payload=body,
        identifier=identifier,
        expiry=expiry,
        priority=priority,
    )


def encode(token: str, payload: NotificationPayload | bytes) -> bytes:
    return encode_notification(token, payload).pack()


def parse_frame(data: bytes) -> NotificationFrame:
    """
    Parse a command-2 frame back into its items.

    Used for diagnostics and tests; the gateway never sends these to clients.
    """

    try:
        command = read_u8(data, 0)
        frame_len = read_u32_be(data, 1)
    except BytesError as e:
        raise EncodingError("Frame too short") from e
    if command != COMMAND_NOTIFICATION:
        raise EncodingError(f"Unexpected command byte: {command}")
    if _HEADER_LEN + frame_len != len(data):
        raise EncodingError(
            f"Frame length mismatch: header says {frame_len}, body is {len(data) - _HEADER_LEN}"
        )

    items: dict[int, bytes] = {}
    offset = _HEADER_LEN
    while offset < len(data):
        try:
            item_id = read_u8(data, offset)
            item_len = read_u16_be(data, offset + 1)
        except BytesError as e:
            raise EncodingError("Truncated item header") from e
        start = offset + _ITEM_HEADER_LEN
        end = start + item_len
        if end > len(data):
            raise EncodingError(f"Item {item_id} length exceeds frame")
        if item_id in items:
            raise EncodingError(f"Duplicate item {item_id}")
        items[item_id] = data[start:end]
        offset = end

    expected = {ITEM_DEVICE_TOKEN, ITEM_PAYLOAD, ITEM_IDENTIFIER, ITEM_EXPIRY, ITEM_PRIORITY}
    if set(items) != expected:
        raise EncodingError(f"Unexpected item set: {sorted(items)}")
    if len(items[ITEM_IDENTIFIER]) != 4 or len(items[ITEM_EXPIRY]) != 4:
        raise EncodingError("Identifier and expiry items must be 4 bytes")
    if len(items[ITEM_PRIORITY]) != 1:
        raise EncodingError("Priority item must be 1 byte")

    return NotificationFrame(
        token=items[ITEM_DEVICE_TOKEN],
        payload=items[ITEM_PAYLOAD],
        identifier=read_u32_be(items[ITEM_IDENTIFIER]),
        expiry=read_u32_be(items[ITEM_EXPIRY]),
        priority=items[ITEM_PRIORITY][0],
    )
