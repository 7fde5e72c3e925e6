"""
Configuration management for the course checkout backend.

Loads settings from .env via pydantic-settings.

Security notes:
    - razorpay_secret and mail_password are SecretStr so they never show up
      in reprs or logs
    - validate_production_settings() refuses to boot a misconfigured production app
"""
import logging

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/courses.db"

    # ── HTTP ────────────────────────────────────────────────────────
    api_prefix: str = "/api"

    # ── Razorpay ────────────────────────────────────────────────────
    razorpay_key_id: str = ""
    razorpay_secret: SecretStr = SecretStr("")
    razorpay_api_base: str = "https://api.razorpay.com/v1"
    razorpay_timeout_seconds: float = 15.0
    currency: str = "INR"

    # ── Mail (SMTP) ─────────────────────────────────────────────────
    mail_host: str = ""
    mail_port: int = 587
    mail_user: str = ""
    mail_password: SecretStr = SecretStr("")
    mail_from: str = "StudyNotion <no-reply@studynotion.local>"
    mail_use_tls: bool = True
    mail_timeout_seconds: float = 20.0

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "course-platform-api"
    jwt_access_ttl_minutes: int = 60

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "https://pathshala-ruby.vercel.app,http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Production refuses to start without
        gateway credentials, a JWT secret and an SMTP host; development
        only logs what is missing.
        """
        problems = []
        if not self.razorpay_key_id or not self.razorpay_secret.get_secret_value():
            problems.append("RAZORPAY_KEY_ID / RAZORPAY_SECRET not set (checkout disabled)")
        if not self.jwt_secret:
            problems.append("JWT_SECRET not set (authenticated endpoints will fail)")
        if not self.mail_host:
            problems.append("MAIL_HOST not set (enrollment emails cannot be delivered)")
        if "*" in self.cors_origins:
            problems.append("CORS_ORIGINS contains '*' (open access)")

        if self.environment == "production":
            if problems:
                raise ValueError(
                    "Refusing to start in production: " + "; ".join(problems)
                )
            logger.info("Production settings validated")
        else:
            for p in problems:
                logger.warning(p)


# Global settings instance
settings = Settings()
