"""Content-derived certificate fingerprints."""

import hashlib

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from notary.trustmanager.errors import ParseFailedError


def fingerprint_cert(cert: x509.Certificate) -> str:
    """Compute the fingerprint of a parsed certificate.

    Args:
        cert: Parsed X.509 certificate.

    Returns:
        Lowercase hexadecimal SHA-256 of the DER encoding.
    """
    der_bytes = cert.public_bytes(serialization.Encoding.DER)
    return hashlib.sha256(der_bytes).hexdigest()


def fingerprint_pem(cert_pem: str | bytes) -> str:
    """Compute the fingerprint of a PEM encoded certificate.

    Raises:
        ParseFailedError: If the PEM is not a valid certificate.
    """
    if isinstance(cert_pem, str):
        cert_pem = cert_pem.encode("utf-8")
    try:
        cert = x509.load_pem_x509_certificate(cert_pem)
    except ValueError as e:
        raise ParseFailedError("<pem>", str(e)) from e
    return fingerprint_cert(cert)


def normalize_fingerprint(fingerprint: str) -> str:
    """Normalize a user supplied fingerprint for lookups."""
    return fingerprint.strip().lower()
