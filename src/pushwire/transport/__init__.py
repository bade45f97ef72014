from .base import (
    PRODUCTION_GATEWAY,
    SANDBOX_GATEWAY,
    ConnectError,
    Endpoint,
    Transport,
    TransportError,
    WriteError,
)
from .credentials import CertificateInfo, ConfigurationError, inspect_certificate
from .tls import TlsTransport

__all__ = [
    "PRODUCTION_GATEWAY",
    "SANDBOX_GATEWAY",
    "CertificateInfo",
    "ConfigurationError",
    "ConnectError",
    "Endpoint",
    "TlsTransport",
    "Transport",
    "TransportError",
    "WriteError",
    "inspect_certificate",
]
