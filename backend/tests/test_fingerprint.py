"""Tests for certificate fingerprinting."""

import hashlib

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from notary.trustmanager.errors import ParseFailedError
from notary.trustmanager.fingerprint import fingerprint_cert, fingerprint_pem, normalize_fingerprint


class TestFingerprint:
    """Tests for fingerprint_cert and fingerprint_pem."""

    def test_fingerprint_matches_direct_sha256(self, make_cert):
        """Test that the fingerprint is the SHA-256 of the DER encoding."""
        cert = make_cert()
        der = cert.public_bytes(serialization.Encoding.DER)

        assert fingerprint_cert(cert) == hashlib.sha256(der).hexdigest()

    def test_fingerprint_is_lowercase_hex(self, make_cert):
        """Test that fingerprints are 64 lowercase hex characters."""
        fingerprint = fingerprint_cert(make_cert())

        assert len(fingerprint) == 64
        assert all(c in "0123456789abcdef" for c in fingerprint)

    def test_fingerprint_is_deterministic(self, make_cert):
        """Test that repeated calls yield the same fingerprint."""
        cert = make_cert()

        assert fingerprint_cert(cert) == fingerprint_cert(cert)

    def test_fingerprint_stable_across_reparse(self, make_cert):
        """Test that PEM and DER re-parses of the same bytes agree."""
        cert = make_cert()
        from_pem = x509.load_pem_x509_certificate(cert.public_bytes(serialization.Encoding.PEM))
        from_der = x509.load_der_x509_certificate(cert.public_bytes(serialization.Encoding.DER))

        assert fingerprint_cert(from_pem) == fingerprint_cert(cert)
        assert fingerprint_cert(from_der) == fingerprint_cert(cert)

    def test_distinct_certificates_have_distinct_fingerprints(self, make_cert):
        """Test that two certificates for the same name differ."""
        assert fingerprint_cert(make_cert("same")) != fingerprint_cert(make_cert("same"))

    def test_fingerprint_pem_accepts_str_and_bytes(self, make_cert):
        """Test fingerprint_pem on str and bytes input."""
        cert = make_cert()
        pem = cert.public_bytes(serialization.Encoding.PEM)

        assert fingerprint_pem(pem) == fingerprint_cert(cert)
        assert fingerprint_pem(pem.decode("utf-8")) == fingerprint_cert(cert)

    def test_fingerprint_pem_rejects_garbage(self):
        """Test that malformed PEM raises ParseFailedError."""
        with pytest.raises(ParseFailedError):
            fingerprint_pem("-----BEGIN CERTIFICATE-----\nnope\n-----END CERTIFICATE-----\n")

    def test_normalize_fingerprint(self):
        """Test that lookups ignore case and surrounding whitespace."""
        assert normalize_fingerprint("  ABCdef \n") == "abcdef"
