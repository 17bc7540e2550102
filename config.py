"""
Configuration for the account verification Flask app.
Values come from the environment; create_app freezes them into ServiceSettings
so services never read os.environ or current_app themselves.
"""
import os
from dataclasses import dataclass


def _is_production():
    """True when running on Railway, Render, Vercel or explicit production."""
    return (
        os.environ.get("RENDER") == "true"
        or os.environ.get("RAILWAY_ENVIRONMENT") is not None
        or os.environ.get("VERCEL_ENV") == "production"
        or os.environ.get("FLASK_ENV") == "production"
    )


def _env_flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("true", "on", "1")


def normalize_endpoint(url):
    """Strip whitespace, trailing slashes and a trailing /v1 from the provider URL."""
    if not url:
        return ""
    url = url.strip().rstrip("/")
    if url.endswith("/v1"):
        url = url[:-3]
    return url.rstrip("/")


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    APP_NAME = os.environ.get("APP_NAME", "PetRanker")

    # Identity provider (Appwrite admin API)
    APPWRITE_ENDPOINT = os.environ.get("APPWRITE_ENDPOINT", "")
    APPWRITE_PROJECT = os.environ.get("APPWRITE_PROJECT", "")
    APPWRITE_API_KEY = os.environ.get("APPWRITE_API_KEY", "")
    PROVIDER_TIMEOUT_SECONDS = float(os.environ.get("PROVIDER_TIMEOUT_SECONDS") or 10)

    # Verification tokens and login credentials
    TOKEN_SECRET = os.environ.get("TOKEN_SECRET", "")
    REGISTER_TOKEN_EXPIRE_SECONDS = int(os.environ.get("REGISTER_TOKEN_EXPIRE_SECONDS") or 120)
    VERIFY_TOKEN_TTL_SECONDS = int(os.environ.get("VERIFY_TOKEN_TTL_SECONDS") or 24 * 60 * 60)

    # Redirect targets
    VERIFY_BASE = os.environ.get("VERIFY_BASE", "")
    MOBILE_DEEP_LINK_SCHEME = os.environ.get("MOBILE_DEEP_LINK_SCHEME") or "petranker://auth/verified"
    VERIFY_WELCOME_ENDPOINT = os.environ.get("VERIFY_WELCOME_ENDPOINT", "")

    # Email: Brevo HTTP API takes precedence over SMTP
    BREVO_API_KEY = os.environ.get("BREVO_API_KEY", "")
    MAIL_SENDER_EMAIL = os.environ.get("MAIL_SENDER_EMAIL") or "noreply@yourapp.com"
    MAIL_SENDER_NAME = os.environ.get("MAIL_SENDER_NAME") or APP_NAME

    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = int(os.environ.get("MAIL_PORT") or 587)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER") or MAIL_SENDER_EMAIL

    # Dev convenience: hand the verification link back when no mail backend exists
    RETURN_LINK_WHEN_MAIL_UNCONFIGURED = not _is_production()


@dataclass(frozen=True)
class ServiceSettings:
    """Immutable snapshot of the options the services depend on."""
    provider_endpoint: str = ""
    provider_project: str = ""
    provider_api_key: str = ""
    provider_timeout: float = 10.0
    token_secret: str = ""
    credential_ttl_seconds: int = 120
    token_ttl_seconds: int = 24 * 60 * 60
    verify_base: str = ""
    mobile_scheme: str = "petranker://auth/verified"
    welcome_endpoint: str = ""
    app_name: str = "PetRanker"
    return_link_when_mail_unconfigured: bool = True

    @property
    def provider_configured(self) -> bool:
        return bool(self.provider_endpoint and self.provider_project and self.provider_api_key)

    @classmethod
    def from_mapping(cls, config):
        """Build settings from a Flask config (or any mapping with the same keys)."""
        verify_base = (config.get("VERIFY_BASE") or "").strip().rstrip("/")
        welcome_endpoint = (config.get("VERIFY_WELCOME_ENDPOINT") or "").strip()
        if not welcome_endpoint and verify_base:
            welcome_endpoint = f"{verify_base}/send-welcome"
        return cls(
            provider_endpoint=normalize_endpoint(config.get("APPWRITE_ENDPOINT")),
            provider_project=config.get("APPWRITE_PROJECT") or "",
            provider_api_key=config.get("APPWRITE_API_KEY") or "",
            provider_timeout=float(config.get("PROVIDER_TIMEOUT_SECONDS") or 10),
            token_secret=config.get("TOKEN_SECRET") or "",
            credential_ttl_seconds=int(config.get("REGISTER_TOKEN_EXPIRE_SECONDS") or 120),
            token_ttl_seconds=int(config.get("VERIFY_TOKEN_TTL_SECONDS") or 24 * 60 * 60),
            verify_base=verify_base,
            mobile_scheme=config.get("MOBILE_DEEP_LINK_SCHEME") or "petranker://auth/verified",
            welcome_endpoint=welcome_endpoint,
            app_name=config.get("APP_NAME") or "PetRanker",
            return_link_when_mail_unconfigured=bool(config.get("RETURN_LINK_WHEN_MAIL_UNCONFIGURED", True)),
        )
