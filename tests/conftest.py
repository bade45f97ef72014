from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

CERT_SUBJECT = "Apple Push Services: com.example.app"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _ = config
    for item in items:
        p = Path(str(item.fspath))
        parts = p.parts
        if "tests" in parts and "unit" in parts:
            item.add_marker(pytest.mark.unit)


def write_pem_bundle(
    path: Path,
    *,
    passphrase: str | None = None,
    days: int = 365,
    include_key: bool = True,
) -> Path:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, CERT_SUBJECT)])
    now = dt.datetime.now(dt.timezone.utc)
    not_after = now + dt.timedelta(days=days)
    not_before = min(now, not_after) - dt.timedelta(days=1)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )

    pem = cert.public_bytes(serialization.Encoding.PEM)
    if include_key:
        encryption: serialization.KeySerializationEncryption
        if passphrase is None:
            encryption = serialization.NoEncryption()
        else:
            encryption = serialization.BestAvailableEncryption(passphrase.encode("utf-8"))
        pem += key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            encryption,
        )
    path.write_bytes(pem)
    return path


@pytest.fixture
def make_certificate(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "push.pem", **kwargs: object) -> Path:
        return write_pem_bundle(tmp_path / name, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def certificate(make_certificate: Callable[..., Path]) -> Path:
    return make_certificate()
