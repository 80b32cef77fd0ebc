"""
neighbora/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and builds the Firebase Admin app from the provided credentials.
Nothing is initialized at import time: `create_app` calls `build_firebase_app(settings)`
and injects the result into the auth and admin gates.
"""
import json
import logging
from functools import lru_cache
from typing import Literal, Optional

import firebase_admin
from firebase_admin import credentials
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("neighbora.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    app_env: Literal["development", "test", "production"] = Field("development", alias="APP_ENV")
    debug: bool = Field(False, alias="DEBUG")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    allowed_origins: str = Field("*", alias="ALLOWED_ORIGINS")  # Comma-separated list or '*' for all
    port: int = Field(9001, alias="PORT")

    mongo_uri: str = Field("mongodb://localhost:27017", alias="MONGO_URI")
    mongo_db_name: str = Field("neighbora", alias="MONGO_DB_NAME")

    firebase_project_id: Optional[str] = Field(None, alias="FIREBASE_PROJECT_ID")
    firebase_cred_file: Optional[str] = Field(None, alias="FIREBASE_CRED_FILE")
    # Whole service account JSON in one variable
    firebase_service_account_key: Optional[str] = Field(None, alias="FIREBASE_SERVICE_ACCOUNT_KEY")

    # Firebase credentials from split environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = Field(None, alias="FIREBASE_PRIVATE_KEY_ID")
    firebase_private_key: Optional[str] = Field(None, alias="FIREBASE_PRIVATE_KEY")
    firebase_client_email: Optional[str] = Field(None, alias="FIREBASE_CLIENT_EMAIL")
    firebase_client_id: Optional[str] = Field(None, alias="FIREBASE_CLIENT_ID")
    firebase_auth_uri: Optional[str] = Field(None, alias="FIREBASE_AUTH_URI")
    firebase_token_uri: Optional[str] = Field(None, alias="FIREBASE_TOKEN_URI")
    firebase_auth_provider_x509_cert_url: Optional[str] = Field(None, alias="FIREBASE_AUTH_PROVIDER_X509_CERT_URL")
    firebase_client_x509_cert_url: Optional[str] = Field(None, alias="FIREBASE_CLIENT_X509_CERT_URL")

    # Unverified token decoding; development only
    allow_insecure_dev_auth: bool = Field(False, alias="ALLOW_INSECURE_DEV_AUTH")
    # record: admins collection | claims: Firebase custom claims
    admin_auth_source: Literal["record", "claims"] = Field("record", alias="ADMIN_AUTH_SOURCE")

    payment_max_retries: int = Field(5, ge=1, alias="PAYMENT_MAX_RETRIES")

    def model_post_init(self, __context):
        """Refuse insecure dev auth in production."""
        if self.is_production and self.allow_insecure_dev_auth:
            raise ValueError("ALLOW_INSECURE_DEV_AUTH cannot be enabled when APP_ENV=production")

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def origins(self) -> list[str]:
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def firebase_configured(self) -> bool:
        return bool(self.firebase_project_id) and bool(
            self.firebase_service_account_key or self.firebase_cred_file or self._split_credentials_present()
        )

    def _split_credentials_present(self) -> bool:
        return all([
            self.firebase_private_key_id,
            self.firebase_private_key,
            self.firebase_client_email,
            self.firebase_client_id,
            self.firebase_auth_uri,
            self.firebase_token_uri,
            self.firebase_auth_provider_x509_cert_url,
            self.firebase_client_x509_cert_url,
        ])

    def firebase_credential_source(self):
        """Service account as a dict (inline JSON or split vars) or a file path."""
        if self.firebase_service_account_key:
            return json.loads(self.firebase_service_account_key)
        if self._split_credentials_present():
            return {
                "type": "service_account",
                "project_id": self.firebase_project_id,
                "private_key_id": self.firebase_private_key_id,
                # Env vars usually carry escaped newlines
                "private_key": self.firebase_private_key.replace("\\n", "\n"),
                "client_email": self.firebase_client_email,
                "client_id": self.firebase_client_id,
                "auth_uri": self.firebase_auth_uri,
                "token_uri": self.firebase_token_uri,
                "auth_provider_x509_cert_url": self.firebase_auth_provider_x509_cert_url,
                "client_x509_cert_url": self.firebase_client_x509_cert_url,
            }
        return self.firebase_cred_file


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def build_firebase_app(settings: Settings, name: str = "neighbora") -> Optional[firebase_admin.App]:
    """
    Build (or reuse) a named Firebase Admin app.
    Returns None when Firebase is not configured; the auth gate then runs in degraded mode.
    """
    if not settings.firebase_configured:
        logger.warning("Firebase Admin not configured - authentication is unavailable")
        return None

    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass

    cred = credentials.Certificate(settings.firebase_credential_source())
    app = firebase_admin.initialize_app(cred, {"projectId": settings.firebase_project_id}, name=name)
    logger.info("Firebase Admin initialized for project %s", settings.firebase_project_id)
    return app
