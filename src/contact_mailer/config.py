"""Configuration management for the contact mailer."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from contact_mailer.errors import ConfigurationError


# MailerConfig field -> the environment keys an operator sets for it
SETTING_KEYS = {
    "smtp_server": "SMTP_SERVER / EmailSettings__SmtpServer",
    "smtp_port": "SMTP_PORT / EmailSettings__SmtpPort",
    "sender_name": "SENDER_NAME / EmailSettings__SenderName",
    "sender_email": "SENDER_EMAIL / EmailSettings__SenderEmail",
    "username": "SMTP_USERNAME / EmailSettings__Username",
    "password": "SMTP_PASSWORD / EmailSettings__Password",
    "verify_certs": "SMTP_VERIFY_CERTS",
    "ca_bundle": "SMTP_CA_BUNDLE",
}


class MailerConfig(BaseModel):
    """SMTP relay settings consumed by the mailer.

    Built once at startup and passed into ``Mailer``. Instances are frozen
    and the password never shows up in ``repr`` or log output.
    """

    model_config = ConfigDict(frozen=True)

    smtp_server: str = Field(min_length=1, description="SMTP relay hostname")
    smtp_port: int = Field(gt=0, lt=65536, description="SMTP relay port")
    sender_name: str = Field(min_length=1, description="Display name for the From header")
    sender_email: str = Field(min_length=1, description="Address used in the From header")
    username: str = Field(min_length=1, description="SMTP AUTH username")
    password: SecretStr = Field(description="SMTP AUTH password")

    verify_certs: bool = Field(default=True, description="Verify the relay TLS certificate")
    ca_bundle: Optional[Path] = Field(default=None, description="Extra CA bundle (PEM)")

    @field_validator("password")
    @classmethod
    def _password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SMTP relay configuration. The EmailSettings__* names mirror the
    # sectioned keys of existing deployments.
    smtp_server: str = Field(
        default="smtp.gmail.com",
        validation_alias=AliasChoices("smtp_server", "EmailSettings__SmtpServer"),
        description="SMTP relay hostname",
    )
    smtp_port: int = Field(
        default=587,
        validation_alias=AliasChoices("smtp_port", "EmailSettings__SmtpPort"),
        description="SMTP relay port (STARTTLS submission)",
    )
    sender_name: str = Field(
        default="",
        validation_alias=AliasChoices("sender_name", "EmailSettings__SenderName"),
        description="Display name for the sender",
    )
    sender_email: str = Field(
        default="",
        validation_alias=AliasChoices("sender_email", "EmailSettings__SenderEmail"),
        description="Address that appears as the sender",
    )
    smtp_username: str = Field(
        default="",
        validation_alias=AliasChoices("smtp_username", "EmailSettings__Username"),
        description="SMTP AUTH username",
    )
    smtp_password: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("smtp_password", "EmailSettings__Password"),
        description="SMTP AUTH password (app specific password for Gmail)",
    )

    # TLS Configuration
    smtp_verify_certs: bool = Field(default=True, description="Verify relay certificates")
    smtp_ca_bundle: Optional[Path] = Field(default=None, description="Path to extra CA bundle")

    # Contact form
    contact_recipient: Optional[str] = Field(
        default=None,
        description="Inbox receiving contact form submissions (defaults to sender_email)",
    )

    # HTTP Server Configuration
    http_host: str = Field(default="0.0.0.0", description="HTTP server bind address")
    http_port: int = Field(default=8080, description="HTTP server port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or console)")

    def mailer_config(self) -> MailerConfig:
        """Build the immutable mailer configuration.

        Raises:
            ConfigurationError: If a required SMTP setting is empty or invalid
        """
        values = {
            "smtp_server": self.smtp_server,
            "smtp_port": self.smtp_port,
            "sender_name": self.sender_name,
            "sender_email": self.sender_email,
            "username": self.smtp_username,
            "password": self.smtp_password,
            "verify_certs": self.smtp_verify_certs,
            "ca_bundle": self.smtp_ca_bundle,
        }
        try:
            return MailerConfig(**values)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            keys = [SETTING_KEYS.get(field, field) for field in fields]
            raise ConfigurationError(
                f"Invalid mailer configuration: {', '.join(keys)}"
            ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
