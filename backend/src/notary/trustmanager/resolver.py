"""Certificate retrieval from URLs and filesystem paths.

Precedence is fixed: any location that parses with a non-empty URL scheme
is fetched as a URL and is never reinterpreted as a filesystem path, even
when a file of that exact name exists.
"""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

import httpx
from cryptography import x509
from opentelemetry import trace

from notary.metrics import notary_metrics
from notary.trustmanager.errors import (
    FetchFailedError,
    InvalidSourceError,
    ParseFailedError,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PEM_CERTIFICATE_MARKER = b"-----BEGIN CERTIFICATE-----"
FETCH_SCHEMES = ("http", "https")


def parse_certificate(data: bytes, source: str) -> x509.Certificate:
    """Parse PEM or DER certificate bytes.

    PEM input may carry several blocks; the first certificate is used.

    Raises:
        ParseFailedError: If the bytes do not hold a valid certificate.
    """
    try:
        if PEM_CERTIFICATE_MARKER in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise ParseFailedError(source, str(e)) from e


def load_cert_from_file(path: str | os.PathLike[str]) -> x509.Certificate:
    """Load a certificate from a PEM or DER file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise FetchFailedError(str(path), str(e)) from e
    return parse_certificate(data, str(path))


def is_url(location: str) -> bool:
    """True when the location has a non-empty URL scheme."""
    try:
        return urlparse(location).scheme != ""
    except ValueError:
        return False


class CertificateResolver:
    """Resolves a location string to a parsed certificate."""

    def __init__(self, client: httpx.Client | None = None) -> None:
        """Initialize resolver.

        Args:
            client: HTTP client used for URL sources. A default client is
                created lazily when not supplied.
        """
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def resolve(self, location: str) -> x509.Certificate:
        """Resolve a URL or file path to a certificate.

        Raises:
            FetchFailedError: URL or file retrieval failed.
            ParseFailedError: Retrieved bytes are not a certificate.
            InvalidSourceError: Location is neither a URL nor an existing path.
        """
        with tracer.start_as_current_span("CertificateResolver.resolve") as span:
            span.set_attribute("location", location)

            if is_url(location):
                span.set_attribute("source_kind", "url")
                return self._resolve(location, "url", self.get_cert_from_url)

            if os.path.exists(location):
                span.set_attribute("source_kind", "file")
                return self._resolve(location, "file", load_cert_from_file)

            logger.warning("certificate_source_invalid", extra={"source": location})
            raise InvalidSourceError(location)

    def _resolve(
        self, location: str, kind: str, loader: Callable[[str], x509.Certificate]
    ) -> x509.Certificate:
        try:
            cert = loader(location)
        except (FetchFailedError, ParseFailedError) as e:
            notary_metrics.record_certificate_resolved(kind, "error")
            logger.warning(
                "certificate_resolution_failed",
                extra={"source": location, "source_kind": kind, "error": str(e)},
            )
            raise
        notary_metrics.record_certificate_resolved(kind, "ok")
        return cert

    def get_cert_from_url(self, url: str) -> x509.Certificate:
        """Fetch and parse a certificate served at a URL."""
        scheme = urlparse(url).scheme.lower()
        if scheme not in FETCH_SCHEMES:
            raise FetchFailedError(url, f"unsupported URL scheme: {scheme}")

        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchFailedError(url, str(e)) from e

        return parse_certificate(response.content, url)
