"""
Configuration management for the teleconsultation access service.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management. Every group reads its
own environment prefix so deployments can override any value without a
code change.
"""

from typing import Annotated, List, Optional

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class OtpSettings(BaseSettings):
    """One-time password issuance settings."""

    model_config = SettingsConfigDict(env_prefix="CONSULTATION_OTP_")

    length: int = Field(default=6, description="Number of digits in a generated OTP")
    ttl_seconds: float = Field(default=300.0, description="Lifetime of a pending OTP challenge")
    resend_cooldown_seconds: float = Field(
        default=30.0, description="Minimum delay before another OTP is sent to the same mobile"
    )
    max_attempts: int = Field(default=5, description="Verification calls allowed per challenge")

    @field_validator("length")
    @classmethod
    def validate_length(cls, v: int) -> int:
        if not 4 <= v <= 10:
            raise ValueError("OTP length must be between 4 and 10 digits")
        return v

    @field_validator("ttl_seconds", "resend_cooldown_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("OTP durations must be positive")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v


class AccessSettings(BaseSettings):
    """Consultation access token settings."""

    model_config = SettingsConfigDict(env_prefix="CONSULTATION_ACCESS_")

    enabled: bool = Field(
        default=True, description="Require an access token on gated decrypt endpoints"
    )
    token_ttl_seconds: float = Field(default=900.0, description="Lifetime of an access token")

    @field_validator("token_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Access token TTL must be positive")
        return v


class CrmSettings(BaseSettings):
    """External CRM (appointment system of record) settings."""

    model_config = SettingsConfigDict(env_prefix="CRM_")

    token_url: str = Field(default="", description="OAuth-style token endpoint")
    tele_mobile_url: str = Field(default="", description="Appointment/mobile verification endpoint")
    username: str = Field(default="", description="CRM API user")
    password: str = Field(default="", description="CRM API password")
    grant_type: str = Field(default="password", description="Token grant type")
    request_timeout_seconds: float = Field(default=7.0, description="Per-request timeout")
    token_refresh_margin_seconds: float = Field(
        default=60.0, description="Refresh the cached token when less validity than this remains"
    )
    default_token_ttl_seconds: float = Field(
        default=600.0, description="Token lifetime assumed when the CRM omits expires_in"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.token_url and self.tele_mobile_url and self.username and self.password)


class SmsSettings(BaseSettings):
    """SMS gateway settings used for OTP delivery."""

    model_config = SettingsConfigDict(env_prefix="OTP_SMS_")

    url: str = Field(default="https://iqsms.airtel.in/api/v1/send-sms", description="Gateway URL")
    customer_id: str = Field(default="", description="Gateway customer id")
    user: str = Field(default="", description="Basic auth user (falls back to customer_id)")
    password: str = Field(default="", description="Basic auth password")
    source_address: str = Field(default="KAUVRY", description="Registered sender id")
    template_id: str = Field(default="", description="DLT template id")
    entity_id: str = Field(default="", description="DLT entity id")
    message_type: str = Field(default="SERVICE_IMPLICIT", description="Gateway message type")
    message: str = Field(
        default=(
            "Welcome! Use OTP {#var#} to verify your identity and join your Teleconsultation "
            "video session.\n\nThis code is confidential and valid for a short time only.\n\n"
            "kauvery hospital"
        ),
        description="Message template; {#var#} is replaced by the OTP",
    )
    timeout_seconds: float = Field(default=30.0, description="Per-request timeout")
    verify_ssl: bool = Field(default=True, description="Verify the gateway TLS certificate")

    @property
    def auth_user(self) -> str:
        return self.user or self.customer_id

    @property
    def is_configured(self) -> bool:
        return bool(self.auth_user and self.password)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if "{#var#}" not in v:
            raise ValueError("SMS message template must contain the {#var#} placeholder")
        return v


class DecryptSettings(BaseSettings):
    """Link parameter decryption settings."""

    model_config = SettingsConfigDict(env_prefix="DECRYPT_")

    key: str = Field(default="", description="AES key (16, 24 or 32 bytes once UTF-8 encoded)")
    max_text_length: int = Field(default=1000, description="Maximum ciphertext length per item")
    max_batch_items: int = Field(default=20, description="Maximum items per batch request")

    def model_post_init(self, __context) -> None:
        """Accept the legacy DECRYPTION_KEY variable name."""
        if not self.key:
            legacy = os.getenv("DECRYPTION_KEY", "")
            if legacy:
                object.__setattr__(self, "key", legacy)

    @field_validator("max_text_length", "max_batch_items")
    @classmethod
    def validate_limits(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Decrypt limits must be at least 1")
        return v


class RateLimitSettings(BaseSettings):
    """Per-client rate limit applied to decrypt endpoints."""

    model_config = SettingsConfigDict(env_prefix="DECRYPT_RATE_LIMIT_")

    enabled: bool = Field(default=True, description="Enable decrypt rate limiting")
    max_requests: int = Field(default=20, description="Requests allowed per window")
    window_seconds: float = Field(default=900.0, description="Sliding window length")
    block_seconds: float = Field(default=1800.0, description="Block duration once exceeded")
    burst_allowance: int = Field(default=10, description="Requests tolerated in a burst")
    burst_window_seconds: float = Field(default=60.0, description="Burst tracking window")
    burst_min_interval_seconds: float = Field(
        default=2.0, description="A full burst faster than this blocks the client"
    )
    max_tracked_clients: int = Field(default=1000, description="Idle eviction threshold")
    idle_eviction_seconds: float = Field(default=3600.0, description="Idle client entry lifetime")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"], description="Allowed CORS origins"
    )
    allowed_methods: List[str] = Field(default=["GET", "POST", "OPTIONS"])
    allowed_headers: List[str] = Field(
        default=[
            "Content-Type",
            "Authorization",
            "X-Consultation-Token",
            "X-Consultation-Link",
            "X-Request-ID",
        ]
    )
    allow_credentials: bool = Field(default=True)

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from a comma separated or JSON-like string."""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    app_name: str = Field(default="Teleconsult Access", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")
    session_sweep_interval_seconds: float = Field(
        default=60.0, description="Interval between expired-session sweeps"
    )

    otp: OtpSettings = Field(default_factory=OtpSettings)
    access: AccessSettings = Field(default_factory=AccessSettings)
    crm: CrmSettings = Field(default_factory=CrmSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    decrypt: DecryptSettings = Field(default_factory=DecryptSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("session_sweep_interval_seconds")
    @classmethod
    def validate_sweep_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Sweep interval must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    Already-set environment variables always win over file values.
    """
    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
