from __future__ import annotations

import asyncio

import pytest

from pushwire.gateway.response import (
    ErrorResponseReader,
    ResponseError,
    decode_error_response,
)


class _FakePending:
    def __init__(self, chunks: list[bytes] | None = None) -> None:
        self._chunks = list(chunks or [])
        self.requested: list[int] = []

    async def read_pending(self, max_bytes: int) -> bytes:
        self.requested.append(max_bytes)
        if not self._chunks:
            return b""
        chunk = self._chunks.pop(0)
        assert len(chunk) <= max_bytes
        return chunk


def test_response__decode__no_error() -> None:
    resp = decode_error_response(bytes([8, 0, 0, 0, 0, 1]))
    assert resp.command == 8
    assert resp.status == 0
    assert resp.identifier == 1
    assert not resp.is_error


def test_response__decode__status_and_identifier() -> None:
    resp = decode_error_response(bytes([8, 7, 0, 0, 0, 1]))
    assert resp.status == 7
    assert resp.identifier == 1
    assert resp.is_error
    assert resp.description == "Invalid payload size"


def test_response__decode__big_endian_identifier() -> None:
    resp = decode_error_response(bytes([8, 8, 0, 0, 0x27, 0x0F]))
    assert resp.identifier == 9999
    assert resp.description == "Invalid token"


def test_response__decode__unknown_status_description() -> None:
    assert decode_error_response(bytes([8, 42, 0, 0, 0, 1])).description == "None (unknown)"


def test_response__decode__rejects_bad_frames() -> None:
    with pytest.raises(ResponseError):
        decode_error_response(bytes([8, 7, 0, 0, 1]))
    with pytest.raises(ResponseError):
        decode_error_response(bytes([9, 7, 0, 0, 0, 1]))


def test_response__read_pending__nothing_available_is_none() -> None:
    async def _run() -> None:
        reader = ErrorResponseReader()
        transport = _FakePending()
        assert await reader.read_pending(transport) is None
        assert transport.requested == [6]

    asyncio.run(_run())


def test_response__read_pending__full_frame() -> None:
    async def _run() -> None:
        reader = ErrorResponseReader()
        transport = _FakePending([bytes([8, 7, 0, 0, 0, 1])])
        resp = await reader.read_pending(transport)
        assert resp is not None
        assert resp.status == 7
        assert resp.identifier == 1

    asyncio.run(_run())


def test_response__read_pending__partial_frame_completes_on_next_poll() -> None:
    async def _run() -> None:
        reader = ErrorResponseReader()
        transport = _FakePending([bytes([8, 8, 0]), bytes([0, 0, 5])])
        assert await reader.read_pending(transport) is None
        resp = await reader.read_pending(transport)
        assert resp is not None
        assert (resp.status, resp.identifier) == (8, 5)
        assert transport.requested == [6, 3]

    asyncio.run(_run())


def test_response__clear__drops_partial_bytes() -> None:
    async def _run() -> None:
        reader = ErrorResponseReader()
        transport = _FakePending([bytes([8, 8, 0])])
        assert await reader.read_pending(transport) is None
        reader.clear()
        assert reader.decode_from_buffer() is None

    asyncio.run(_run())
