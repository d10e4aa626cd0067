"""Keys API endpoints: trusted certificates and signing keys."""

from fastapi import APIRouter, Depends, HTTPException, status

from notary.api.auth import require_api_key
from notary.api.schemas import (
    CertificateResponse,
    GenerateKeyRequest,
    GeneratedKeyResponse,
    KeyListResponse,
    SigningKeyResponse,
    TrustCertificateRequest,
)
from notary.services.confirm import always, is_affirmative
from notary.services.keys_service import ConfirmationDeclinedError, KeysService
from notary.trustmanager.errors import (
    AlreadyTrustedError,
    FetchFailedError,
    InvalidGUNError,
    InvalidSourceError,
    NotFoundError,
    ParseFailedError,
    TrustManagerError,
)
from notary.trustmanager.models import TrustedCertificate

router = APIRouter(prefix="/api/keys", tags=["keys"])

# Global keys service instance, injected at startup
_keys_service: KeysService | None = None


def set_keys_service(service: KeysService | None) -> None:
    """Set the global keys service instance."""
    global _keys_service
    _keys_service = service


def get_keys_service() -> KeysService:
    """Get the global keys service instance."""
    if _keys_service is None:
        raise RuntimeError("KeysService not initialized")
    return _keys_service


def _http_error(e: TrustManagerError) -> HTTPException:
    """Map a trust manager error to an HTTP error."""
    # InvalidSourceError subclasses NotFoundError; check it first
    if isinstance(e, (InvalidSourceError, InvalidGUNError, ParseFailedError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, AlreadyTrustedError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(e, FetchFailedError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(e))


def _certificate(record: TrustedCertificate) -> CertificateResponse:
    return CertificateResponse.from_record(record)


@router.get("", response_model=KeyListResponse)
def list_keys(service: KeysService = Depends(get_keys_service)) -> KeyListResponse:
    """
    List trusted root certificates and signing keys.

    - Trusted: ordered by common name, then fingerprint
    - Signing keys: in directory traversal order
    """
    listing = service.list_keys()
    return KeyListResponse(
        trusted=[_certificate(c) for c in listing.trusted],
        signing_keys=[SigningKeyResponse.from_record(k) for k in listing.signing_keys],
    )


@router.get("/{fingerprint}", response_model=CertificateResponse)
def get_key(
    fingerprint: str,
    service: KeysService = Depends(get_keys_service),
) -> CertificateResponse:
    """
    Get a trusted certificate by fingerprint.

    - Errors: 404 NOT_FOUND
    """
    try:
        return _certificate(service.get(fingerprint))
    except TrustManagerError as e:
        raise _http_error(e) from None


@router.post(
    "/trust",
    status_code=status.HTTP_201_CREATED,
    response_model=CertificateResponse,
    dependencies=[Depends(require_api_key)],
)
def trust_certificate(
    body: TrustCertificateRequest,
    service: KeysService = Depends(get_keys_service),
) -> CertificateResponse:
    """
    Trust a certificate from a URL or file path.

    - Confirmation: 'y' or 'yes' (case-insensitive); anything else aborts
    - Auth: X-API-Key
    - Errors: 400 BAD_REQUEST (invalid source, parse failure, not confirmed),
      401 UNAUTHORIZED, 409 CONFLICT (already trusted), 502 BAD_GATEWAY (fetch failed)
    """
    confirm = always(is_affirmative(body.confirmation))
    try:
        return _certificate(service.trust(body.source, confirm=confirm))
    except ConfirmationDeclinedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except TrustManagerError as e:
        raise _http_error(e) from None


@router.delete(
    "/{fingerprint}",
    response_model=CertificateResponse,
    dependencies=[Depends(require_api_key)],
)
def remove_key(
    fingerprint: str,
    service: KeysService = Depends(get_keys_service),
) -> CertificateResponse:
    """
    Remove trust from a certificate.

    - Auth: X-API-Key
    - Errors: 401 UNAUTHORIZED, 404 NOT_FOUND (not trusted), 500 (found but removal failed)
    """
    try:
        return _certificate(service.remove(fingerprint))
    except TrustManagerError as e:
        raise _http_error(e) from None


@router.post(
    "/generate",
    status_code=status.HTTP_201_CREATED,
    response_model=GeneratedKeyResponse,
    dependencies=[Depends(require_api_key)],
)
def generate_key(
    body: GenerateKeyRequest,
    service: KeysService = Depends(get_keys_service),
) -> GeneratedKeyResponse:
    """
    Generate a signing key and self-signed certificate for a GUN.

    The certificate is added to the trust store and the private key is
    written under the private key directory.

    - Auth: X-API-Key
    - Errors: 400 BAD_REQUEST (invalid GUN), 401 UNAUTHORIZED, 500 (generation or persistence)
    """
    try:
        generated = service.generate(body.gun)
    except TrustManagerError as e:
        raise _http_error(e) from None

    return GeneratedKeyResponse(
        gun=generated.gun,
        fingerprint=generated.fingerprint,
        certificate=_certificate(service.get(generated.fingerprint)),
    )
