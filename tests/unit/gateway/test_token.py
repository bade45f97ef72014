from __future__ import annotations

import pytest

from pushwire.gateway.token import TokenError, decode_token, supports

TOKEN = "a1b2c3d4" * 8


def test_token__supports__accepts_64_hex_chars() -> None:
    assert supports(TOKEN)
    assert supports(TOKEN.upper())
    assert supports("0" * 64)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "a" * 63,
        "a" * 65,
        "g" * 64,
        " " + "a" * 63,
        "a" * 64 + "\n",
        "0x" + "a" * 62,
        None,
        123,
        b"a" * 64,
    ],
)
def test_token__supports__rejects(token: object) -> None:
    assert not supports(token)


def test_token__decode__32_bytes() -> None:
    raw = decode_token(TOKEN)
    assert len(raw) == 32
    assert raw.hex() == TOKEN


def test_token__decode__rejects_bad_token() -> None:
    with pytest.raises(TokenError):
        decode_token("abcd")
    with pytest.raises(TokenError):
        decode_token("z" * 64)
