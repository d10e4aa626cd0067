"""Keys workflows: list, trust, remove and generate."""

import logging
from dataclasses import dataclass

from opentelemetry import trace

from notary.metrics import notary_metrics
from notary.services.confirm import ConfirmFn, ask_confirm
from notary.trustmanager.certificate_generator import CertificateGenerator, GeneratedKeyPair
from notary.trustmanager.crypto import load_encryption_key
from notary.trustmanager.errors import (
    NotFoundError,
    PersistenceFailureError,
    TrustManagerError,
)
from notary.trustmanager.key_store import PrivateKeyFileStore
from notary.trustmanager.models import SigningKeyRecord, TrustedCertificate
from notary.trustmanager.resolver import CertificateResolver
from notary.trustmanager.x509_store import X509FileStore
from shared.config import Settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ConfirmationDeclinedError(Exception):
    """Raised when the user does not confirm adding trust."""

    def __init__(self, common_name: str) -> None:
        self.common_name = common_name
        super().__init__("aborting action.")


@dataclass
class KeyListing:
    """Trusted root certificates and signing keys."""

    trusted: list[TrustedCertificate]
    signing_keys: list[SigningKeyRecord]


class KeysService:
    """Composes resolver, trust store, generator and key store."""

    def __init__(
        self,
        trust_store: X509FileStore,
        key_store: PrivateKeyFileStore,
        resolver: CertificateResolver | None = None,
        generator: CertificateGenerator | None = None,
        confirm: ConfirmFn = ask_confirm,
    ) -> None:
        self.trust_store = trust_store
        self.key_store = key_store
        self.resolver = resolver or CertificateResolver()
        self.generator = generator or CertificateGenerator()
        self.confirm = confirm

    def list_keys(self) -> KeyListing:
        """List trusted certificates and the signing keys on disk."""
        return KeyListing(
            trusted=self.trust_store.get_all(),
            signing_keys=list(self.key_store.list_keys()),
        )

    def get(self, fingerprint: str) -> TrustedCertificate:
        return self.trust_store.get_by_fingerprint(fingerprint)

    def trust(self, location: str, confirm: ConfirmFn | None = None) -> TrustedCertificate:
        """Resolve a certificate from a URL or file and add it after confirmation.

        Args:
            location: URL or filesystem path of the certificate.
            confirm: Overrides the service's confirmation boundary for this call.

        Raises:
            ConfirmationDeclinedError: If the user does not confirm.
            TrustManagerError: Resolution or store failures.
        """
        confirm = confirm or self.confirm

        with tracer.start_as_current_span("KeysService.trust") as span:
            span.set_attribute("location", location)

            cert = self.resolver.resolve(location)
            candidate = TrustedCertificate.from_x509(cert)

            prompt = f"Are you sure you want to add trust for: {candidate.common_name}?"
            if not confirm(prompt):
                logger.info(
                    "trust_declined",
                    extra={"location": location, "fingerprint": candidate.fingerprint},
                )
                raise ConfirmationDeclinedError(candidate.common_name)

            record = self.trust_store.add(cert)
            notary_metrics.record_certificate_trusted("resolved")
            return record

    def remove(self, fingerprint: str) -> TrustedCertificate:
        """Remove trust from the certificate with this fingerprint.

        Raises:
            NotFoundError: No trusted certificate has this fingerprint.
            PersistenceFailureError: The certificate was found but its file
                could not be removed.
        """
        with tracer.start_as_current_span("KeysService.remove") as span:
            span.set_attribute("fingerprint", fingerprint)

            try:
                cert = self.trust_store.get_by_fingerprint(fingerprint)
            except NotFoundError:
                raise NotFoundError(fingerprint, "certificate not found in any store") from None

            try:
                record = self.trust_store.remove(cert)
            except PersistenceFailureError as e:
                raise PersistenceFailureError(
                    fingerprint, "remove certificate from store", e.reason
                ) from e

            notary_metrics.record_certificate_removed()
            return record

    def generate(self, gun: str) -> GeneratedKeyPair:
        """Generate a signing key for a GUN, store the key and trust its certificate.

        If the certificate cannot be trusted the saved key is deleted again,
        so a failed call leaves neither store changed.

        Raises:
            InvalidGUNError: If the GUN is rejected.
            TrustManagerError: Generation or persistence failures.
        """
        with tracer.start_as_current_span("KeysService.generate") as span:
            span.set_attribute("gun", gun)

            generated = self.generator.generate(gun)
            self.key_store.save(gun, generated.fingerprint, generated.private_key)
            try:
                self.trust_store.add(generated.certificate)
            except TrustManagerError:
                logger.warning(
                    "generate_rolled_back",
                    extra={"gun": gun, "fingerprint": generated.fingerprint},
                )
                self.key_store.delete(gun, generated.fingerprint)
                raise
            notary_metrics.record_certificate_trusted("generated")

            span.set_attribute("fingerprint", generated.fingerprint)
            return generated

    def close(self) -> None:
        """Release the resolver's HTTP client."""
        self.resolver.close()


def build_keys_service(settings: Settings, confirm: ConfirmFn = ask_confirm) -> KeysService:
    """Assemble a KeysService from configuration."""
    return KeysService(
        trust_store=X509FileStore(settings.TRUST_DIR),
        key_store=PrivateKeyFileStore(
            settings.PRIVATE_DIR,
            encryption_key=load_encryption_key(settings.KEY_ENCRYPTION_KEY),
        ),
        resolver=CertificateResolver(),
        generator=CertificateGenerator(
            algorithm=settings.KEY_ALGORITHM,
            organization=settings.CERT_ORGANIZATION,
            rsa_key_size=settings.RSA_KEY_SIZE,
        ),
        confirm=confirm,
    )
