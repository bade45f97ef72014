from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from pushwire.core.bytes import read_u8, read_u32_be

logger = logging.getLogger(__name__)

COMMAND_ERROR_RESPONSE = 8
ERROR_RESPONSE_SIZE = 6

NO_ERROR = 0
PROCESSING = 1
MISSING_TOKEN = 2
MISSING_TOPIC = 3
MISSING_PAYLOAD = 4
INVALID_TOKEN_SIZE = 5
INVALID_TOPIC_SIZE = 6
INVALID_PAYLOAD_SIZE = 7
INVALID_TOKEN = 8
SHUTDOWN = 10
UNKNOWN = 255

STATUS_DESCRIPTIONS: dict[int, str] = {
    NO_ERROR: "No errors encountered",
    PROCESSING: "Processing error",
    MISSING_TOKEN: "Missing device token",
    MISSING_TOPIC: "Missing topic",
    MISSING_PAYLOAD: "Missing payload",
    INVALID_TOKEN_SIZE: "Invalid token size",
    INVALID_TOPIC_SIZE: "Invalid topic size",
    INVALID_PAYLOAD_SIZE: "Invalid payload size",
    INVALID_TOKEN: "Invalid token",
    SHUTDOWN: "Shutdown",
    UNKNOWN: "None (unknown)",
}


class ResponseError(Exception):
    pass


class PendingReader(Protocol):
    async def read_pending(self, max_bytes: int) -> bytes: ...


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    command: int
    status: int
    identifier: int

    @property
    def is_error(self) -> bool:
        return self.status != NO_ERROR

    @property
    def description(self) -> str:
        return STATUS_DESCRIPTIONS.get(self.status, STATUS_DESCRIPTIONS[UNKNOWN])


def decode_error_response(data: bytes) -> ErrorResponse:
    if len(data) != ERROR_RESPONSE_SIZE:
        raise ResponseError(
            f"Error response must be {ERROR_RESPONSE_SIZE} bytes, got {len(data)}"
        )
    command = read_u8(data, 0)
    if command != COMMAND_ERROR_RESPONSE:
        raise ResponseError(f"Unexpected response command: {command}")
    return ErrorResponse(
        command=command,
        status=read_u8(data, 1),
        identifier=read_u32_be(data, 2),
    )


@dataclass(slots=True)
class ErrorResponseReader:
    """
    Collects error-response bytes across non-blocking reads.

    The gateway writes a 6-byte error frame at any time after a bad notification and
    then closes the connection. Nothing to read is the normal case and yields None.
    A partial frame is kept until the rest arrives on a later poll.
    """

    _rx_buf: bytearray = field(default_factory=bytearray)

    def decode_from_buffer(self) -> ErrorResponse | None:
        if len(self._rx_buf) < ERROR_RESPONSE_SIZE:
            return None
        chunk = bytes(self._rx_buf[:ERROR_RESPONSE_SIZE])
        del self._rx_buf[:ERROR_RESPONSE_SIZE]
        return decode_error_response(chunk)

    async def read_pending(self, transport: PendingReader) -> ErrorResponse | None:
        missing = ERROR_RESPONSE_SIZE - len(self._rx_buf)
        if missing > 0:
            chunk = await transport.read_pending(missing)
            if chunk:
                self._rx_buf.extend(chunk)
        response = self.decode_from_buffer()
        if response is not None:
            logger.debug(
                "Error response: command=%s status=%s identifier=%s",
                response.command,
                response.status,
                response.identifier,
            )
        return response

    def clear(self) -> None:
        self._rx_buf.clear()
