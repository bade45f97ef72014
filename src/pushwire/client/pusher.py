from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pushwire.gateway.frame import EncodingError, encode_notification
from pushwire.gateway.identifiers import IdentifierGenerator
from pushwire.gateway.payload import PayloadError, build_payload
from pushwire.gateway.response import (
    NO_ERROR,
    ErrorResponse,
    ErrorResponseReader,
    ResponseError,
)
from pushwire.gateway.token import supports as token_supported
from pushwire.transport.base import Transport, TransportError
from pushwire.transport.credentials import CertificateInfo, inspect_certificate
from pushwire.transport.tls import TlsTransport

from .config import PushConfig
from .models import Device, Message

logger = logging.getLogger(__name__)


class PushError(Exception):
    """
    A batch stopped at `index`: `device` could not be encoded or written.

    Devices before it were submitted (see `submitted`); devices after it were not attempted.
    """

    def __init__(
        self,
        message: str,
        *,
        index: int,
        device: Device,
        submitted: set[Device],
    ) -> None:
        super().__init__(message)
        self.index = index
        self.device = device
        self.submitted = submitted


class FeedbackNotSupportedError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class GatewayError:
    status: int
    identifier: int
    description: str
    device: Device | None


class ApnsRawPusher:
    """
    Sends notifications over the binary gateway protocol, one frame per device.

    Error responses arrive asynchronously and may refer to an earlier notification than
    the one just written; they are matched to devices through the identifiers issued in
    the current batch and never abort the batch.
    """

    supports_feedback = False

    def __init__(self, config: PushConfig, *, transport: Transport | None = None) -> None:
        config.validate()
        self._config = config
        cert_path = cast("str | Path", config.certificate)
        self.certificate: CertificateInfo = inspect_certificate(cert_path, config.passphrase)
        self._transport: Transport = transport or TlsTransport(
            endpoint=config.endpoint(),
            certificate=cert_path,
            passphrase=config.passphrase,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )
        self._lock = asyncio.Lock()
        self._ids = IdentifierGenerator()
        self._reader = ErrorResponseReader()
        self._sent: dict[int, Device] = {}
        self._error_code = NO_ERROR
        self._errors: list[GatewayError] = []

    @property
    def config(self) -> PushConfig:
        return self._config

    @property
    def errors(self) -> list[GatewayError]:
        return list(self._errors)

    def supports(self, token: Any) -> bool:
        return token_supported(token)

    def get_response(self) -> int:
        """Last non-zero status code seen during the latest batch, 0 if none."""
        return self._error_code

    def feedback(self) -> list[tuple[str, int]]:
        raise FeedbackNotSupportedError("Feedback service is not implemented for this gateway")

    def build_frame(self, device: Device, message: Message, *, identifier: int) -> bytes:
        payload = build_payload(
            message.text,
            message_badge=message.get_option("badge"),
            device_badge=device.get_parameter("badge", 0),
            custom=message.get_option("custom", {}),
        )
        frame = encode_notification(
            device.token,
            payload,
            identifier=identifier,
            expiry_seconds=self._config.expiry_seconds,
            priority=self._config.priority,
        )
        return frame.pack()

    async def push_all(self, devices: Iterable[Device], message: Message) -> set[Device]:
        async with self._lock:
            self._reset_batch()
            submitted: set[Device] = set()
            try:
                await self._transport.connect()
                for index, device in enumerate(devices):
                    identifier = self._ids.next()
                    try:
                        data = self.build_frame(device, message, identifier=identifier)
                    except (EncodingError, PayloadError) as e:
                        raise PushError(
                            f"Message could not be encoded for device #{index}",
                            index=index,
                            device=device,
                            submitted=submitted,
                        ) from e

                    try:
                        await self._transport.send(data)
                    except TransportError as e:
                        raise PushError(
                            "Message could not be delivered",
                            index=index,
                            device=device,
                            submitted=submitted,
                        ) from e
                    self._sent[identifier] = device
                    logger.debug(
                        "Wrote notification id=%s (%s bytes) for device #%s",
                        identifier,
                        len(data),
                        index,
                    )

                    await self._read_response()
                    submitted.add(device)
            finally:
                await self._transport.close()

            logger.info(
                "Push batch submitted %s device(s); last error code=%s",
                len(submitted),
                self._error_code,
            )
            return submitted

    def _reset_batch(self) -> None:
        self._ids.reset()
        self._reader.clear()
        self._sent.clear()
        self._errors.clear()
        self._error_code = NO_ERROR

    async def _read_response(self) -> None:
        try:
            response = await self._reader.read_pending(self._transport)
        except TransportError as e:
            logger.info("Reading error response failed: %s", e)
            return
        except ResponseError as e:
            logger.warning("Discarding malformed error response: %s", e)
            return
        if response is not None:
            self._record(response)

    def _record(self, response: ErrorResponse) -> None:
        if not response.is_error:
            return
        device = self._sent.get(response.identifier)
        self._error_code = response.status
        self._errors.append(
            GatewayError(
                status=response.status,
                identifier=response.identifier,
                description=response.description,
                device=device,
            )
        )
        logger.warning(
            "Gateway rejected notification id=%s: %s (status=%s, token=%s)",
            response.identifier,
            response.description,
            response.status,
            device.token if device is not None else "?",
        )
