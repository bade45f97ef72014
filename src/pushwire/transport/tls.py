from __future__ import annotations

import asyncio
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path

from .base import ConnectError, Endpoint, TransportError, WriteError
from .credentials import make_ssl_context

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TlsTransport:
    """
    One persistent TLS stream to the push gateway.

    connect() is open-once: while a stream is open it returns without a new handshake.
    Writes wait until the frame is handed to the socket. Reads are a single bounded
    attempt so a caller polling for error responses never stalls on an idle gateway.

    asyncio streams cannot peek at buffered bytes, so an idle read waits out
    `read_timeout` before returning b"". A batch polling after each of N writes
    therefore spends up to N * read_timeout waiting; lower it for large batches.
    """

    endpoint: Endpoint
    certificate: str | Path
    passphrase: str | None = None
    connect_timeout: float = 60.0
    read_timeout: float = 0.05

    _reader: asyncio.StreamReader | None = None
    _writer: asyncio.StreamWriter | None = None
    _peer_closed: bool = False

    @property
    def is_connected(self) -> bool:
        return self._writer is not None

    @property
    def peer_closed(self) -> bool:
        return self._peer_closed

    async def connect(self) -> None:
        if self._writer is not None:
            return
        ctx = make_ssl_context(self.certificate, self.passphrase)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.endpoint.host,
                    self.endpoint.port,
                    ssl=ctx,
                    server_hostname=self.endpoint.host,
                ),
                timeout=self.connect_timeout,
            )
        except (OSError, ssl.SSLError, TimeoutError) as e:
            raise ConnectError(f"Can not connect to push gateway {self.endpoint}") from e
        self._reader, self._writer = reader, writer
        self._peer_closed = False
        logger.info("Connected to push gateway %s", self.endpoint)

    async def close(self) -> None:
        if self._writer is None:
            return
        writer = self._writer
        self._writer = None
        self._reader = None
        writer.close()
        try:
            await writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            logger.debug("Ignoring error while closing %s: %s", self.endpoint, e)
        logger.info("Closed connection to push gateway %s", self.endpoint)

    async def send(self, data: bytes) -> None:
        if self._writer is None:
            raise TransportError("Not connected.")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, ssl.SSLError) as e:
            raise WriteError(f"Failed to write {len(data)} bytes to {self.endpoint}") from e

    async def read_pending(self, max_bytes: int) -> bytes:
        if self._reader is None:
            raise TransportError("Not connected.")
        if self._peer_closed or max_bytes <= 0:
            return b""
        try:
            chunk = await asyncio.wait_for(self._reader.read(max_bytes), timeout=self.read_timeout)
        except TimeoutError:
            return b""
        except (OSError, ssl.SSLError) as e:
            raise TransportError(f"Failed to read from {self.endpoint}") from e
        if not chunk:
            self._peer_closed = True
            logger.info("Push gateway %s closed the connection", self.endpoint)
        return chunk
