from __future__ import annotations

import datetime as dt
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .base import ConnectError

logger = logging.getLogger(__name__)

EXPIRY_WARNING = dt.timedelta(days=30)


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class CertificateInfo:
    path: Path
    subject: str
    not_valid_after: dt.datetime
    has_private_key: bool

    def expires_in(self, now: dt.datetime | None = None) -> dt.timedelta:
        ref = now if now is not None else dt.datetime.now(dt.timezone.utc)
        return self.not_valid_after - ref


def _has_private_key(pem: bytes, passphrase: str | None) -> bool:
    if b"PRIVATE KEY-----" not in pem:
        return False
    password = passphrase.encode("utf-8") if passphrase is not None else None
    try:
        serialization.load_pem_private_key(pem, password=password)
    except TypeError as e:
        # A passphrase supplied for an unencrypted key is ignored, as TLS loading does.
        if password is None:
            raise ConfigurationError("Private key is encrypted but no passphrase was given") from e
        try:
            serialization.load_pem_private_key(pem, password=None)
        except (TypeError, ValueError) as e2:
            raise ConfigurationError("Private key in certificate bundle cannot be loaded") from e2
    except ValueError as e:
        raise ConfigurationError("Private key in certificate bundle cannot be loaded") from e
    return True


def inspect_certificate(path: str | Path, passphrase: str | None = None) -> CertificateInfo:
    """
    Check that a PEM client-certificate bundle exists and parses.

    The bundle is expected to carry the certificate and, usually, its private key
    (optionally encrypted with `passphrase`).
    """

    p = Path(path)
    if not p.is_file():
        raise ConfigurationError(f"Certificate {p} does not exist")
    try:
        pem = p.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Certificate {p} cannot be read") from e

    try:
        cert = x509.load_pem_x509_certificate(pem)
    except ValueError as e:
        raise ConfigurationError(f"Certificate {p} is not a PEM certificate") from e

    info = CertificateInfo(
        path=p,
        subject=cert.subject.rfc4514_string(),
        not_valid_after=cert.not_valid_after_utc,
        has_private_key=_has_private_key(pem, passphrase),
    )

    remaining = info.expires_in()
    if remaining <= dt.timedelta(0):
        logger.warning("Certificate %s (%s) expired at %s", p, info.subject, info.not_valid_after)
    elif remaining <= EXPIRY_WARNING:
        logger.warning(
            "Certificate %s (%s) expires soon: %s", p, info.subject, info.not_valid_after
        )
    return info


def make_ssl_context(certificate: str | Path, passphrase: str | None = None) -> ssl.SSLContext:
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    try:
        ctx.load_cert_chain(str(certificate), password=passphrase)
    except (ssl.SSLError, OSError) as e:
        raise ConnectError(f"Failed to load client certificate {certificate}") from e
    return ctx
