# SPDX-License-Identifier: AGPL-3.0-only

"""
Configuration service for the statement tools.

This module centralizes all configuration settings for the pattern engine and
the distribution workflow, supporting environment variable overrides.
"""

import os
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_MAIL_DOMAIN = "mg.yourdomain.com"
PLACEHOLDER_MAIL_KEY = "key-your-api-key-here"


class ToolsConfig(BaseSettings):
    """Configuration settings for the statement tools."""

    model_config = SettingsConfigDict(
        env_prefix="STATEMENT_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level for application loggers")

    # Upload settings
    upload_folder: str = Field(default="uploads", description="Upload folder path")
    max_file_size: int = Field(default=100 * 1024 * 1024, description="Max upload size in bytes (100MB)")

    # Pattern settings
    pattern_library_path: str = Field(default="pattern_library.json", description="Saved custom pattern library")
    discovery_max_pages: int = Field(default=5, description="Pages analysed by pattern discovery")
    tester_max_pages: int = Field(default=3, description="Pages loaded by the pattern tester")
    tester_match_limit: int = Field(default=50, description="Maximum matches reported per tested pattern")

    # Mailgun settings
    mailgun_domain: str = Field(default=PLACEHOLDER_MAIL_DOMAIN, description="Mailgun sending domain")
    mailgun_api_key: str = Field(default=PLACEHOLDER_MAIL_KEY, description="Mailgun API key")
    mailgun_base_url: str = Field(default="https://api.mailgun.net/v3", description="Mailgun API base URL")
    from_email: str = Field(default="billing@example.com", description="Sender address")
    from_name: str = Field(default="Billing Department", description="Sender display name")
    mail_timeout: int = Field(default=30, description="Mail API timeout in seconds")
    mail_max_retries: int = Field(default=3, description="Attempts per email before giving up")

    def get_mail_config(self) -> dict:
        """Get mail delivery configuration."""
        return {
            "domain": self.mailgun_domain,
            "api_key": self.mailgun_api_key,
            "base_url": self.mailgun_base_url,
            "from_email": self.from_email,
            "from_name": self.from_name,
            "timeout": self.mail_timeout,
            "max_retries": self.mail_max_retries,
        }

    def get_pattern_config(self) -> dict:
        """Get pattern discovery/testing configuration."""
        return {
            "library_path": self.pattern_library_path,
            "discovery_max_pages": self.discovery_max_pages,
            "tester_max_pages": self.tester_max_pages,
            "tester_match_limit": self.tester_match_limit,
        }

    def is_mail_configured(self) -> bool:
        """Check the mail settings are filled in and not the shipped placeholders."""
        return (
            bool(self.mailgun_domain)
            and bool(self.mailgun_api_key)
            and self.mailgun_domain != PLACEHOLDER_MAIL_DOMAIN
            and self.mailgun_api_key != PLACEHOLDER_MAIL_KEY
        )

    def get_effective_upload_folder(self) -> str:
        """Get the effective upload folder path."""
        if os.path.isabs(self.upload_folder):
            return self.upload_folder
        return os.path.join(os.getcwd(), self.upload_folder)


# Global configuration instance
config = ToolsConfig()
