"""Self-signed code-signing certificates bound to a Global Unique Name."""

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from opentelemetry import trace

from notary.metrics import notary_metrics
from notary.trustmanager.crypto import private_key_to_pem
from notary.trustmanager.errors import (
    InvalidGUNError,
    KeyGenFailureError,
    RandomnessFailureError,
)
from notary.trustmanager.fingerprint import fingerprint_cert

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SERIAL_NUMBER_LIMIT = 1 << 128


class KeyAlgorithm(StrEnum):
    RSA = "RSA"
    ECDSA = "ECDSA"


@dataclass
class GeneratedKeyPair:
    """Result of key pair generation."""

    gun: str
    private_key: PrivateKeyTypes
    certificate: x509.Certificate
    fingerprint: str

    @property
    def certificate_pem(self) -> str:
        return self.certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8")

    @property
    def private_key_pem(self) -> str:
        return private_key_to_pem(self.private_key).decode("utf-8")


def validate_gun(gun: str) -> None:
    """Reject empty GUNs and GUNs starting with a path separator.

    Raises:
        InvalidGUNError: If the GUN is rejected.
    """
    if not gun or gun[0] in ("/", "\\"):
        raise InvalidGUNError(gun)


def random_serial_number() -> int:
    """Uniform random serial in [1, 2**128).

    Zero is redrawn since X.509 serial numbers must be positive.

    Raises:
        RandomnessFailureError: If the system entropy source fails.
    """
    try:
        serial = 0
        while serial == 0:
            serial = secrets.randbelow(SERIAL_NUMBER_LIMIT)
        return serial
    except (OSError, NotImplementedError) as e:
        logger.critical("serial_number_generation_failed", extra={"error": str(e)})
        raise RandomnessFailureError(f"failed to generate serial number: {e}") from e


class CertificateGenerator:
    """Generates a key pair and a self-signed certificate for a GUN.

    Certificate attributes:
    - Subject/Issuer: CN=<gun>, O=<organization>
    - Validity: now() to now() + 730 days (a fixed day count, not calendar years)
    - Key Usage: Digital Signature, Key Encipherment
    - Extended Key Usage: Code Signing
    - Basic Constraints: CA=False
    - Key: RSA 2048 or ECDSA P-256
    """

    VALIDITY_DAYS = 730
    DEFAULT_ORGANIZATION = "Notary"
    DEFAULT_RSA_KEY_SIZE = 2048
    ECDSA_CURVE = ec.SECP256R1()

    def __init__(
        self,
        algorithm: KeyAlgorithm | str = KeyAlgorithm.RSA,
        organization: str = DEFAULT_ORGANIZATION,
        rsa_key_size: int = DEFAULT_RSA_KEY_SIZE,
    ) -> None:
        self.algorithm = KeyAlgorithm(str(algorithm).upper())
        self.organization = organization
        self.rsa_key_size = rsa_key_size

    def generate(self, gun: str, organization: str | None = None) -> GeneratedKeyPair:
        """Generate a new key pair and certificate for a GUN.

        The result is not added to any trust store; callers do that.

        Args:
            gun: Global Unique Name, used as the subject common name.
            organization: Subject organization. Defaults to the generator's.

        Returns:
            GeneratedKeyPair with key, certificate and fingerprint.

        Raises:
            InvalidGUNError: If the GUN is empty or starts with a separator.
            RandomnessFailureError: If secure random generation fails.
            KeyGenFailureError: If key or certificate generation fails.
        """
        validate_gun(gun)
        organization = organization or self.organization

        with tracer.start_as_current_span("CertificateGenerator.generate") as span:
            span.set_attribute("gun", gun)
            span.set_attribute("algorithm", self.algorithm.value)

            start_time = time.time()

            serial_number = random_serial_number()
            private_key = self._generate_private_key(gun)

            not_before = datetime.now(timezone.utc).replace(microsecond=0)
            not_after = not_before + timedelta(days=self.VALIDITY_DAYS)

            try:
                certificate = self._build_certificate(
                    private_key, gun, organization, serial_number, not_before, not_after
                )
            except (ValueError, TypeError) as e:
                logger.error("certificate_generation_failed", extra={"gun": gun, "error": str(e)})
                raise KeyGenFailureError(gun, str(e)) from e

            fingerprint = fingerprint_cert(certificate)
            generation_time = time.time() - start_time
            notary_metrics.record_keypair_generated(self.algorithm.value, generation_time)

            span.set_attribute("fingerprint", fingerprint)
            logger.info(
                "keypair_generated",
                extra={
                    "gun": gun,
                    "fingerprint": fingerprint,
                    "serial": format(serial_number, "x"),
                    "not_after": not_after.isoformat(),
                    "duration_seconds": generation_time,
                },
            )

            return GeneratedKeyPair(
                gun=gun,
                private_key=private_key,
                certificate=certificate,
                fingerprint=fingerprint,
            )

    def _generate_private_key(self, gun: str) -> PrivateKeyTypes:
        try:
            if self.algorithm == KeyAlgorithm.ECDSA:
                return ec.generate_private_key(self.ECDSA_CURVE)
            return rsa.generate_private_key(public_exponent=65537, key_size=self.rsa_key_size)
        except (ValueError, TypeError) as e:
            logger.error("key_generation_failed", extra={"gun": gun, "error": str(e)})
            raise KeyGenFailureError(gun, str(e)) from e

    def _build_certificate(
        self,
        private_key: PrivateKeyTypes,
        gun: str,
        organization: str,
        serial_number: int,
        not_before: datetime,
        not_after: datetime,
    ) -> x509.Certificate:
        subject = issuer = x509.Name(
            [
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
                x509.NameAttribute(NameOID.COMMON_NAME, gun),
            ]
        )

        return (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(private_key.public_key())  # type: ignore[arg-type]
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    key_encipherment=True,
                    key_cert_sign=False,
                    crl_sign=False,
                    content_commitment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CODE_SIGNING]),
                critical=False,
            )
            .sign(private_key, hashes.SHA256())  # type: ignore[arg-type]
        )
