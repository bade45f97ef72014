from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class TransportError(Exception):
    pass


class ConnectError(TransportError):
    pass


class WriteError(TransportError):
    pass


class Transport(Protocol):
    """
    What the pusher needs from a connection:
    - connect/close with open-once semantics
    - send a whole frame or fail
    - one bounded, non-blocking read attempt
    """

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...
    async def close(self) -> None: ...
    async def send(self, data: bytes) -> None: ...
    async def read_pending(self, max_bytes: int) -> bytes: ...


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


GATEWAY_PORT = 2195

PRODUCTION_GATEWAY = Endpoint(host="gateway.push.apple.com", port=GATEWAY_PORT)
SANDBOX_GATEWAY = Endpoint(host="gateway.sandbox.push.apple.com", port=GATEWAY_PORT)
