"""Error taxonomy for trust store, resolution and key generation."""


class TrustManagerError(Exception):
    """Base class for all trust manager failures."""

    pass


class NotFoundError(TrustManagerError):
    """Raised when a certificate is not present in the trust store."""

    def __init__(self, fingerprint: str, message: str | None = None) -> None:
        self.fingerprint = fingerprint
        super().__init__(message or f"certificate not found: {fingerprint}")


class InvalidSourceError(NotFoundError):
    """Raised when a location is neither a URL nor an existing file."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(
            source,
            f"please provide a file location or URL for CA certificate: {source!r}",
        )


class FetchFailedError(TrustManagerError):
    """Raised when certificate bytes cannot be retrieved from a source."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"error retrieving certificate from {source}: {reason}")


class ParseFailedError(TrustManagerError):
    """Raised when retrieved bytes are not a valid X.509 certificate."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"could not parse certificate from {source}: {reason}")


class AlreadyTrustedError(TrustManagerError):
    """Raised when adding a certificate whose fingerprint is already trusted."""

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"certificate already trusted: {fingerprint}")


class InvalidGUNError(TrustManagerError):
    """Raised when a Global Unique Name fails validation."""

    def __init__(self, gun: str) -> None:
        self.gun = gun
        super().__init__(f"invalid Global Unique Name: {gun!r}")


class RandomnessFailureError(TrustManagerError):
    """Raised when the secure random source is unusable. Never retried."""

    pass


class KeyGenFailureError(TrustManagerError):
    """Raised when key pair or certificate generation fails."""

    def __init__(self, gun: str, reason: str) -> None:
        self.gun = gun
        self.reason = reason
        super().__init__(f"could not generate key for {gun}: {reason}")


class PersistenceFailureError(TrustManagerError):
    """Raised when a durable write or delete fails."""

    def __init__(self, identifier: str, operation: str, reason: str) -> None:
        self.identifier = identifier
        self.operation = operation
        self.reason = reason
        super().__init__(f"failed to {operation} {identifier}: {reason}")
