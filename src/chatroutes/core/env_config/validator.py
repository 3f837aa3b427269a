"""
Pydantic settings for environment configuration.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..config import (
    DEFAULT_BASE_URL,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
)


class ChatRoutesSettings(BaseSettings):
    """
    ChatRoutes client configuration from environment variables.

    Reads from:
    1. Environment variables (CHATROUTES_*)
    2. .env file
    3. Defaults

    Example .env file:
        CHATROUTES_API_KEY=cr_live_xxxxxxxx
        CHATROUTES_BASE_URL=https://api.chatroutes.com
        CHATROUTES_TIMEOUT=60
        CHATROUTES_RETRY_ATTEMPTS=5
        CHATROUTES_LOG_ENABLED=true
        CHATROUTES_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix='CHATROUTES_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    api_key: Optional[str] = Field(default=None, description="API key for authentication")
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-attempt timeout in seconds")
    retry_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, ge=0, le=10)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0, description="Base backoff delay in seconds")

    # Logging
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_enable_correlation_id: bool = Field(default=True)

    @field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Empty string means "not set"; short keys are rejected."""
        if v is not None:
            v = v.strip()
            if not v:
                return None
            if len(v) < 8:
                raise ValueError("API key must be at least 8 characters")
        return v

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip('/')

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_format', mode='before')
    @classmethod
    def normalize_log_format(cls, v):
        return v.lower() if isinstance(v, str) else v

    @model_validator(mode='after')
    def validate_file_path(self) -> 'ChatRoutesSettings':
        """log_file_path is required when log_enable_file=True."""
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self
