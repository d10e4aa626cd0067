"""File-backed store of trusted X.509 certificates.

Each trusted certificate lives in its own PEM file named after its
fingerprint inside the trust directory:

    <trust_dir>/<fingerprint>.crt

The in-memory index is rebuilt from the directory at construction time and
is only updated after the corresponding file operation has succeeded.
"""

import logging
import os
import tempfile
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from opentelemetry import trace

from notary.metrics import notary_metrics
from notary.trustmanager.errors import (
    AlreadyTrustedError,
    NotFoundError,
    ParseFailedError,
    PersistenceFailureError,
)
from notary.trustmanager.fingerprint import fingerprint_cert, normalize_fingerprint
from notary.trustmanager.models import TrustedCertificate
from notary.trustmanager.resolver import parse_certificate

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class X509FileStore:
    """Persistent mapping of fingerprint to trusted certificate.

    Re-adding a certificate that is already trusted raises
    AlreadyTrustedError; entries are never overwritten.
    """

    CERT_EXTENSION = ".crt"
    LOADABLE_EXTENSIONS = (".crt", ".pem")
    FILE_MODE = 0o644

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        self._certs: dict[str, TrustedCertificate] = {}
        self._paths: dict[str, list[Path]] = {}
        self._ensure_directory()
        self._load()

    def _ensure_directory(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceFailureError(
                str(self.directory), "create trust directory", str(e)
            ) from e

    def _load(self) -> None:
        for path in sorted(self.directory.iterdir()):
            if not path.is_file() or path.suffix not in self.LOADABLE_EXTENSIONS:
                continue

            try:
                cert = parse_certificate(path.read_bytes(), str(path))
            except OSError as e:
                logger.warning(
                    "trust_store_file_unreadable", extra={"path": str(path), "error": str(e)}
                )
                notary_metrics.record_load_skipped("unreadable")
                continue
            except ParseFailedError as e:
                logger.warning(
                    "trust_store_file_unparsable", extra={"path": str(path), "error": str(e)}
                )
                notary_metrics.record_load_skipped("unparsable")
                continue

            record = TrustedCertificate.from_x509(cert)
            fingerprint = record.fingerprint

            if fingerprint in self._certs:
                logger.warning(
                    "trust_store_duplicate_certificate",
                    extra={"path": str(path), "fingerprint": fingerprint},
                )
                notary_metrics.record_load_skipped("duplicate")
                self._paths[fingerprint].append(path)
                continue

            if path.stem != fingerprint:
                logger.warning(
                    "trust_store_fingerprint_mismatch",
                    extra={"path": str(path), "fingerprint": fingerprint},
                )

            self._certs[fingerprint] = record
            self._paths[fingerprint] = [path]

        logger.debug(
            "trust_store_loaded",
            extra={"directory": str(self.directory), "count": len(self._certs)},
        )

    def __len__(self) -> int:
        return len(self._certs)

    def __contains__(self, fingerprint: object) -> bool:
        return isinstance(fingerprint, str) and normalize_fingerprint(fingerprint) in self._certs

    def path_for(self, fingerprint: str) -> Path:
        """Return the file a certificate with this fingerprint is stored in."""
        fingerprint = normalize_fingerprint(fingerprint)
        paths = self._paths.get(fingerprint)
        if paths:
            return paths[0]
        return self.directory / f"{fingerprint}{self.CERT_EXTENSION}"

    def get_by_fingerprint(self, fingerprint: str) -> TrustedCertificate:
        """Exact-match lookup.

        Raises:
            NotFoundError: If no trusted certificate has this fingerprint.
        """
        try:
            return self._certs[normalize_fingerprint(fingerprint)]
        except KeyError:
            raise NotFoundError(fingerprint) from None

    def get_all(self) -> list[TrustedCertificate]:
        """All trusted certificates ordered by common name, then fingerprint."""
        return sorted(self._certs.values(), key=lambda c: (c.common_name, c.fingerprint))

    def add(self, cert: x509.Certificate) -> TrustedCertificate:
        """Persist a certificate and index it under its fingerprint.

        Raises:
            AlreadyTrustedError: If the fingerprint is already trusted.
            PersistenceFailureError: If the file could not be written.
        """
        record = TrustedCertificate.from_x509(cert)
        fingerprint = record.fingerprint

        with tracer.start_as_current_span("X509FileStore.add") as span:
            span.set_attribute("fingerprint", fingerprint)
            span.set_attribute("common_name", record.common_name)

            if fingerprint in self._certs:
                raise AlreadyTrustedError(fingerprint)

            path = self.directory / f"{fingerprint}{self.CERT_EXTENSION}"
            self._write_atomic(path, cert.public_bytes(serialization.Encoding.PEM), fingerprint)

            self._certs[fingerprint] = record
            self._paths[fingerprint] = [path]

            logger.info(
                "certificate_trusted",
                extra={"fingerprint": fingerprint, "common_name": record.common_name},
            )
            return record

    def remove(self, cert: TrustedCertificate | x509.Certificate) -> TrustedCertificate:
        """Delete every file holding the certificate, then drop it from the index.

        Files deleted before a failure stay deleted; the index entry is kept
        until no file for the fingerprint remains.

        Raises:
            NotFoundError: If the certificate is not trusted.
            PersistenceFailureError: If the file could not be deleted.
        """
        if isinstance(cert, TrustedCertificate):
            fingerprint = cert.fingerprint
        else:
            fingerprint = fingerprint_cert(cert)

        with tracer.start_as_current_span("X509FileStore.remove") as span:
            span.set_attribute("fingerprint", fingerprint)

            record = self.get_by_fingerprint(fingerprint)
            paths = self._paths[fingerprint]

            while paths:
                path = paths[0]
                try:
                    path.unlink()
                except FileNotFoundError:
                    logger.warning(
                        "trust_store_file_missing",
                        extra={"fingerprint": fingerprint, "path": str(path)},
                    )
                except OSError as e:
                    logger.error(
                        "certificate_remove_failed",
                        extra={"fingerprint": fingerprint, "path": str(path), "error": str(e)},
                    )
                    raise PersistenceFailureError(
                        fingerprint, "remove certificate", str(e)
                    ) from e
                paths.pop(0)

            del self._certs[fingerprint]
            del self._paths[fingerprint]

            logger.info(
                "certificate_removed",
                extra={"fingerprint": fingerprint, "common_name": record.common_name},
            )
            return record

    def _write_atomic(self, path: Path, data: bytes, fingerprint: str) -> None:
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, self.FILE_MODE)
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)
            logger.error(
                "certificate_write_failed",
                extra={"fingerprint": fingerprint, "path": str(path), "error": str(e)},
            )
            raise PersistenceFailureError(fingerprint, "write certificate", str(e)) from e
