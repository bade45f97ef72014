from __future__ import annotations

import struct

import pytest

from pushwire.gateway.frame import (
    EncodingError,
    NotificationFrame,
    encode,
    encode_notification,
    parse_frame,
)
from pushwire.gateway.payload import build_payload

TOKEN = "0123456789abcdef" * 4


def _items(framed: bytes) -> list[tuple[int, bytes]]:
    out: list[tuple[int, bytes]] = []
    offset = 5
    while offset < len(framed):
        item_id = framed[offset]
        (ln,) = struct.unpack_from(">H", framed, offset + 1)
        out.append((item_id, framed[offset + 3 : offset + 3 + ln]))
        offset += 3 + ln
    return out


def test_frame__encode__outer_length_matches_items() -> None:
    payload = build_payload("Hello", message_badge=1)
    framed = encode(TOKEN, payload)
    assert framed[0] == 2
    (frame_len,) = struct.unpack_from(">I", framed, 1)
    assert frame_len == len(framed) - 5

    body = payload.to_json()
    assert frame_len == (3 + 32) + (3 + len(body)) + (3 + 4) + (3 + 4) + (3 + 1)


def test_frame__encode__item_order_and_values() -> None:
    payload = build_payload("Hello")
    frame = encode_notification(TOKEN, payload, identifier=1234, now=1_700_000_000)
    items = _items(frame.pack())

    assert [i for i, _ in items] == [1, 2, 3, 4, 5]
    assert items[0][1] == bytes.fromhex(TOKEN)
    assert items[1][1] == payload.to_json()
    assert items[2][1] == b"\x00\x00\x04\xd2"
    assert struct.unpack(">I", items[3][1])[0] == 1_700_000_000 + 86400
    assert items[4][1] == b"\x0a"


def test_frame__encode__random_identifier_in_range() -> None:
    payload = build_payload("x")
    for _ in range(200):
        frame = encode_notification(TOKEN, payload)
        assert 1 <= frame.identifier <= 9999


def test_frame__encode__custom_expiry_and_priority() -> None:
    frame = encode_notification(
        TOKEN,
        build_payload("x"),
        expiry_seconds=60,
        priority=5,
        now=1000.9,
    )
    assert frame.expiry == 1060
    assert frame.priority == 5


def test_frame__encode__rejects_bad_token() -> None:
    with pytest.raises(EncodingError):
        encode("not-a-token", build_payload("x"))
    with pytest.raises(EncodingError):
        encode(TOKEN[:-2], build_payload("x"))


def test_frame__encode__rejects_oversized_payload() -> None:
    frame = encode_notification(TOKEN, b"x" * 0x10000, identifier=1, expiry=1)
    with pytest.raises(EncodingError):
        frame.pack()


def test_frame__parse__recovers_all_items() -> None:
    payload = build_payload("Round", message_badge=4, custom={"k": "v"})
    frame = encode_notification(TOKEN, payload, identifier=42, expiry=1_800_000_000)
    out = parse_frame(frame.pack())

    assert out == frame
    assert out.token.hex() == TOKEN
    assert out.payload == payload.to_json()
    assert out.identifier == 42
    assert out.expiry == 1_800_000_000
    assert out.priority == 10


def test_frame__parse__rejects_length_mismatch() -> None:
    framed = encode_notification(TOKEN, build_payload("x"), identifier=1, expiry=1).pack()
    with pytest.raises(EncodingError):
        parse_frame(framed[:-1])
    with pytest.raises(EncodingError):
        parse_frame(framed + b"\x00")


def test_frame__parse__rejects_wrong_command() -> None:
    framed = bytearray(encode(TOKEN, build_payload("x")))
    framed[0] = 1
    with pytest.raises(EncodingError):
        parse_frame(bytes(framed))


def test_frame__pack__rejects_short_token() -> None:
    frame = NotificationFrame(token=b"\x00" * 31, payload=b"{}", identifier=1, expiry=1)
    with pytest.raises(EncodingError):
        frame.pack()
