from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Notary Keys"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Storage
    TRUST_DIR: Path = Path.home() / ".notary" / "trusted_certificates"
    PRIVATE_DIR: Path = Path.home() / ".notary" / "private"

    # Key generation
    KEY_ALGORITHM: str = "RSA"  # "RSA" or "ECDSA"
    RSA_KEY_SIZE: int = 2048
    CERT_ORGANIZATION: str = "Notary"

    # Optional Fernet key; private keys are written encrypted when set
    KEY_ENCRYPTION_KEY: Optional[str] = None

    # Argon2id hash of the admin API key; mutating endpoints reject all keys when unset
    ADMIN_API_KEY_HASH: Optional[str] = None


settings = Settings()
