"""Shared fixtures for notary tests."""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def build_certificate(
    common_name: str = "test.example",
    organization: str | None = None,
    days: int = 10,
    ca: bool = False,
) -> x509.Certificate:
    """Create a minimal self-signed certificate."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
    if organization:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    subject = issuer = x509.Name(attributes)

    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=days))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(private_key, hashes.SHA256())
    )


@pytest.fixture
def make_cert():
    """Factory fixture for self-signed test certificates."""
    return build_certificate


@pytest.fixture
def trust_dir(tmp_path):
    return tmp_path / "trusted_certificates"


@pytest.fixture
def private_dir(tmp_path):
    return tmp_path / "private"
