"""Read-only records handed out by the trust store and key enumerator."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from notary.trustmanager.fingerprint import fingerprint_cert

_KEY_USAGE_FLAGS = (
    "digital_signature",
    "content_commitment",
    "key_encipherment",
    "data_encipherment",
    "key_agreement",
    "key_cert_sign",
    "crl_sign",
)


def _name_values(name: x509.Name, oid: x509.ObjectIdentifier) -> list[str]:
    return [str(attr.value) for attr in name.get_attributes_for_oid(oid)]


def _key_usage(cert: x509.Certificate) -> frozenset[str]:
    try:
        ku = cert.extensions.get_extension_for_class(x509.KeyUsage).value
    except x509.ExtensionNotFound:
        return frozenset()
    return frozenset(flag for flag in _KEY_USAGE_FLAGS if getattr(ku, flag))


def _extended_key_usage(cert: x509.Certificate) -> tuple[str, ...]:
    try:
        eku = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    except x509.ExtensionNotFound:
        return ()
    return tuple(oid.dotted_string for oid in eku)


def _basic_constraints(cert: x509.Certificate) -> tuple[bool, bool]:
    """Return (present, is_ca)."""
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False, False
    return True, bc.ca


@dataclass(frozen=True)
class TrustedCertificate:
    """A parsed certificate as held by the trust store.

    Attributes mirror the modelled certificate fields; the wrapped
    x509.Certificate is immutable, so callers never share mutable state
    with the store.
    """

    fingerprint: str
    common_name: str
    organization: tuple[str, ...]
    serial_number: int
    not_before: datetime
    not_after: datetime
    key_usage: frozenset[str]
    extended_key_usage: tuple[str, ...]
    basic_constraints_valid: bool
    is_ca: bool
    certificate: x509.Certificate = field(repr=False, compare=False)

    @classmethod
    def from_x509(cls, cert: x509.Certificate) -> "TrustedCertificate":
        common_names = _name_values(cert.subject, NameOID.COMMON_NAME)
        bc_valid, is_ca = _basic_constraints(cert)
        return cls(
            fingerprint=fingerprint_cert(cert),
            common_name=common_names[0] if common_names else "",
            organization=tuple(_name_values(cert.subject, NameOID.ORGANIZATION_NAME)),
            serial_number=cert.serial_number,
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
            key_usage=_key_usage(cert),
            extended_key_usage=_extended_key_usage(cert),
            basic_constraints_valid=bc_valid,
            is_ca=is_ca,
            certificate=cert,
        )

    @property
    def pem(self) -> str:
        return self.certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8")

    def expires_in_days(self, now: datetime | None = None) -> int:
        """Whole days until expiry, floored. Negative once expired."""
        now = now or datetime.now(timezone.utc)
        remaining = self.not_after - now
        return math.floor(remaining.total_seconds() / 86400)

    def describe(self, now: datetime | None = None) -> str:
        """One-line display form: '<CN> <fingerprint> (expires in: N days)'."""
        return (
            f"{self.common_name} {self.fingerprint} "
            f"(expires in: {self.expires_in_days(now)} days)"
        )


@dataclass(frozen=True)
class SigningKeyRecord:
    """A private key found on disk, identified by its GUN and fingerprint."""

    gun: str
    fingerprint: str
    path: str

    def describe(self) -> str:
        return f"{self.gun} {self.fingerprint}"
