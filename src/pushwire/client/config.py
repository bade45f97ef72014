from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pushwire.gateway.frame import (
    DEFAULT_EXPIRY_SECONDS,
    PRIORITY_CONSERVE_POWER,
    PRIORITY_IMMEDIATE,
)
from pushwire.transport.base import PRODUCTION_GATEWAY, SANDBOX_GATEWAY, Endpoint
from pushwire.transport.credentials import ConfigurationError

ENVIRONMENTS = ("production", "sandbox")


def _truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class PushConfig:
    certificate: str | Path | None
    passphrase: str | None = None
    environment: str = "sandbox"
    host: str | None = None
    port: int | None = None
    expiry_seconds: int = DEFAULT_EXPIRY_SECONDS
    priority: int = PRIORITY_IMMEDIATE
    connect_timeout: float = 60.0
    read_timeout: float = 0.05

    def validate(self) -> None:
        if self.certificate is None or not str(self.certificate):
            raise ConfigurationError("certificate is required")
        if self.environment not in ENVIRONMENTS:
            raise ConfigurationError(
                f"environment must be one of {ENVIRONMENTS}, got {self.environment!r}"
            )
        if self.port is not None and not (0 < self.port < 65536):
            raise ConfigurationError(f"Invalid port: {self.port}")
        if self.expiry_seconds < 0:
            raise ConfigurationError("expiry_seconds must be >= 0")
        if self.priority not in {PRIORITY_IMMEDIATE, PRIORITY_CONSERVE_POWER}:
            raise ConfigurationError(f"Unsupported priority: {self.priority}")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("timeouts must be > 0")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def endpoint(self) -> Endpoint:
        default = PRODUCTION_GATEWAY if self.is_production else SANDBOX_GATEWAY
        return Endpoint(
            host=self.host if self.host is not None else default.host,
            port=self.port if self.port is not None else default.port,
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "PUSHWIRE_",
        environ: Mapping[str, str] | None = None,
    ) -> PushConfig:
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            v = env.get(prefix + name)
            if v is None or not v.strip():
                return None
            return v.strip()

        try:
            port = get("PORT")
            expiry = get("EXPIRY_SECONDS")
            priority = get("PRIORITY")
            connect_timeout = get("CONNECT_TIMEOUT")
            read_timeout = get("READ_TIMEOUT")
            cfg = cls(
                certificate=get("CERTIFICATE"),
                passphrase=get("PASSPHRASE"),
                environment="production" if _truthy(get("PRODUCTION")) else "sandbox",
                host=get("HOST"),
                port=int(port) if port is not None else None,
                expiry_seconds=int(expiry) if expiry is not None else DEFAULT_EXPIRY_SECONDS,
                priority=int(priority) if priority is not None else PRIORITY_IMMEDIATE,
                connect_timeout=float(connect_timeout) if connect_timeout is not None else 60.0,
                read_timeout=float(read_timeout) if read_timeout is not None else 0.05,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid {prefix}* environment value") from e
        return cfg
