"""Private signing keys on disk.

Keys are stored under a root directory using the layout

    <root>/<GUN as nested directories>/<fingerprint>.key

with '%' in a GUN segment written as '%25'. The layout is the only index:
list_signing_keys reconstructs (GUN, fingerprint) pairs from relative paths,
so every writer must keep it.
"""

import fnmatch
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import unquote

from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from notary.trustmanager.certificate_generator import validate_gun
from notary.trustmanager.crypto import (
    encrypt_private_key,
    load_private_key,
    private_key_to_pem,
)
from notary.trustmanager.errors import InvalidGUNError, NotFoundError, PersistenceFailureError
from notary.trustmanager.models import SigningKeyRecord

logger = logging.getLogger(__name__)

KEY_EXTENSION = ".key"
KEY_PATTERN = f"*{KEY_EXTENSION}"


def quote_segment(segment: str) -> str:
    """Escape '%' in a GUN segment; the inverse of the decoding in signing_key_record."""
    return segment.replace("%", "%25")


def signing_key_record(
    root: str | os.PathLike[str], path: str | os.PathLike[str]
) -> SigningKeyRecord:
    """Decompose a key file path relative to root into a SigningKeyRecord.

    The basename without extension is the fingerprint; the parent path, with
    separators normalized to '/' and percent-escapes decoded, is the GUN.
    """
    relative = os.path.relpath(path, root)
    stem, _ = os.path.splitext(relative)

    fingerprint = os.path.basename(stem)
    gun_dir = os.path.dirname(stem)
    if os.sep != "/":
        gun_dir = gun_dir.replace(os.sep, "/")

    gun = unquote(gun_dir.strip("/"))
    return SigningKeyRecord(gun=gun, fingerprint=fingerprint, path=str(path))


def list_signing_keys(root: str | os.PathLike[str]) -> Iterator[SigningKeyRecord]:
    """Lazily yield a record for every '*.key' file below root.

    Directories and non-matching files are skipped. Entries that fail during
    traversal are skipped too, so partial results are expected when parts of
    the tree are unreadable.
    """

    def _skip(error: OSError) -> None:
        logger.debug("signing_key_walk_error", extra={"path": error.filename, "error": str(error)})

    for dirpath, dirnames, filenames in os.walk(root, onerror=_skip):
        dirnames.sort()
        for name in sorted(filenames):
            if not fnmatch.fnmatchcase(name, KEY_PATTERN):
                continue
            yield signing_key_record(root, os.path.join(dirpath, name))


class PrivateKeyFileStore:
    """Writes and reads private keys in the GUN/fingerprint layout."""

    DIR_MODE = 0o700
    FILE_MODE = 0o600

    def __init__(self, root: str | os.PathLike[str], encryption_key: bytes | None = None) -> None:
        """Initialize the key store.

        Args:
            root: Private key root directory.
            encryption_key: Optional Fernet key; keys are encrypted at rest when set.
        """
        self.root = Path(root)
        self._encryption_key = encryption_key

    def path_for(self, gun: str, fingerprint: str) -> Path:
        """Location of the key for (gun, fingerprint).

        Each GUN segment becomes one directory level. A literal '%' is written
        as '%25' so list_signing_keys decodes the directory back to the GUN.

        Raises:
            InvalidGUNError: If the GUN is invalid or has an empty, '.' or '..'
                segment.
        """
        validate_gun(gun)
        segments = gun.split("/")
        if any(segment in ("", ".", "..") for segment in segments):
            raise InvalidGUNError(gun)
        directories = (quote_segment(segment) for segment in segments)
        return self.root.joinpath(*directories, f"{fingerprint}{KEY_EXTENSION}")

    def save(self, gun: str, fingerprint: str, private_key: PrivateKeyTypes) -> Path:
        """Persist a private key.

        Raises:
            InvalidGUNError: If the GUN cannot be mapped into the layout.
            PersistenceFailureError: If the key could not be written.
        """
        path = self.path_for(gun, fingerprint)
        data = encrypt_private_key(private_key_to_pem(private_key), self._encryption_key)

        tmp = None
        try:
            path.parent.mkdir(mode=self.DIR_MODE, parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp, self.FILE_MODE)
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)
            logger.error(
                "private_key_write_failed",
                extra={"gun": gun, "fingerprint": fingerprint, "error": str(e)},
            )
            raise PersistenceFailureError(fingerprint, "write private key", str(e)) from e

        logger.info(
            "private_key_saved",
            extra={
                "gun": gun,
                "fingerprint": fingerprint,
                "encrypted": self._encryption_key is not None,
            },
        )
        return path

    def load(self, gun: str, fingerprint: str) -> PrivateKeyTypes:
        """Read a private key back.

        Raises:
            NotFoundError: If no key exists for (gun, fingerprint).
            CryptoError: If the key cannot be decrypted or parsed.
        """
        path = self.path_for(gun, fingerprint)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(
                fingerprint, f"private key not found: {gun} {fingerprint}"
            ) from None
        return load_private_key(data, self._encryption_key)

    def delete(self, gun: str, fingerprint: str) -> None:
        """Remove a stored key. A key that is already gone is not an error.

        Raises:
            PersistenceFailureError: If the key file could not be deleted.
        """
        path = self.path_for(gun, fingerprint)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(
                "private_key_delete_failed",
                extra={"gun": gun, "fingerprint": fingerprint, "error": str(e)},
            )
            raise PersistenceFailureError(fingerprint, "delete private key", str(e)) from e

        logger.info("private_key_deleted", extra={"gun": gun, "fingerprint": fingerprint})

    def list_keys(self) -> Iterator[SigningKeyRecord]:
        """Enumerate keys under this store's root."""
        return list_signing_keys(self.root)
