"""Pydantic schemas for the keys API."""

from datetime import datetime

from pydantic import BaseModel, Field

from notary.trustmanager.models import SigningKeyRecord, TrustedCertificate


class TrustCertificateRequest(BaseModel):
    """Request body for trusting a certificate."""

    source: str = Field(..., min_length=1, description="URL or file path of the certificate")
    confirmation: str = Field("", description="Answer to the trust prompt: 'y' or 'yes' confirms")


class GenerateKeyRequest(BaseModel):
    """Request body for generating a signing key."""

    gun: str = Field(..., description="Global Unique Name the key is bound to")


class CertificateResponse(BaseModel):
    """Response model for a trusted certificate."""

    fingerprint: str
    common_name: str
    organization: list[str]
    serial_number: str
    not_before: datetime
    not_after: datetime
    expires_in_days: int
    key_usage: list[str]
    extended_key_usage: list[str]
    is_ca: bool
    certificate_pem: str

    @classmethod
    def from_record(cls, record: TrustedCertificate) -> "CertificateResponse":
        return cls(
            fingerprint=record.fingerprint,
            common_name=record.common_name,
            organization=list(record.organization),
            serial_number=format(record.serial_number, "x"),
            not_before=record.not_before,
            not_after=record.not_after,
            expires_in_days=record.expires_in_days(),
            key_usage=sorted(record.key_usage),
            extended_key_usage=list(record.extended_key_usage),
            is_ca=record.is_ca,
            certificate_pem=record.pem,
        )


class SigningKeyResponse(BaseModel):
    """Response model for a signing key found on disk."""

    gun: str
    fingerprint: str

    model_config = {"from_attributes": True}

    @classmethod
    def from_record(cls, record: SigningKeyRecord) -> "SigningKeyResponse":
        return cls.model_validate(record)


class KeyListResponse(BaseModel):
    """Response model for listing keys."""

    trusted: list[CertificateResponse]
    signing_keys: list[SigningKeyResponse]


class GeneratedKeyResponse(BaseModel):
    """Response for a newly generated signing key."""

    gun: str
    fingerprint: str
    certificate: CertificateResponse
