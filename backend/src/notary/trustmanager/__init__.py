"""Trust management for the notary keys workflows.

This module provides:
- Certificate fingerprinting and source resolution (URL or file)
- A file-backed store of trusted certificates
- Key pair and self-signed certificate generation for a GUN
- Private key storage and signing-key enumeration
"""

from notary.trustmanager.certificate_generator import CertificateGenerator, GeneratedKeyPair
from notary.trustmanager.fingerprint import fingerprint_cert
from notary.trustmanager.key_store import PrivateKeyFileStore, list_signing_keys
from notary.trustmanager.models import SigningKeyRecord, TrustedCertificate
from notary.trustmanager.resolver import CertificateResolver
from notary.trustmanager.x509_store import X509FileStore

__all__ = [
    "CertificateGenerator",
    "CertificateResolver",
    "GeneratedKeyPair",
    "PrivateKeyFileStore",
    "SigningKeyRecord",
    "TrustedCertificate",
    "X509FileStore",
    "fingerprint_cert",
    "list_signing_keys",
]
