"""
Configuration loader from environment variables and .env files.
"""

from typing import Any, Optional

from ..config import ClientConfig
from ..logging.config import LoggingConfig
from .secrets import mask_secret
from .validator import ChatRoutesSettings


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> ClientConfig:
    """
    Load ClientConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters
    2. Environment variables (CHATROUTES_*)
    3. .env file
    4. Defaults

    Args:
        env_file: Custom .env file path (default: ./.env)
        **overrides: Explicit config overrides, same names as the settings fields

    Raises:
        pydantic.ValidationError: Invalid environment values

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(env_file=".env.staging", timeout=60)
    """
    if env_file is not None:
        settings = ChatRoutesSettings(_env_file=env_file)
    else:
        settings = ChatRoutesSettings()

    values = settings.model_dump()

    unknown = set(overrides) - set(values)
    if unknown:
        raise TypeError(f"Unknown config overrides: {', '.join(sorted(unknown))}")

    values.update({key: value for key, value in overrides.items() if value is not None})

    logging_config = None
    if values['log_enabled']:
        logging_config = LoggingConfig.create(
            level=values['log_level'],
            format=values['log_format'],
            enable_console=values['log_enable_console'],
            enable_file=values['log_enable_file'],
            file_path=values['log_file_path'],
            enable_correlation_id=values['log_enable_correlation_id'],
        )

    return ClientConfig(
        api_key=values['api_key'],
        base_url=values['base_url'],
        timeout=values['timeout'],
        retry_attempts=values['retry_attempts'],
        retry_delay=values['retry_delay'],
        logging=logging_config,
    )


def config_summary(config: ClientConfig) -> str:
    """
    Human-readable configuration summary with the API key masked.

    Example:
        >>> print(config_summary(load_from_env()))
        ClientConfig:
          api_key: cr_l***3456
          base_url: https://api.chatroutes.com
          ...
    """
    lines = [
        "ClientConfig:",
        f"  api_key: {mask_secret(config.api_key) if config.api_key else '(not set)'}",
        f"  base_url: {config.base_url}",
        f"  timeout: {config.timeout}s",
        f"  retry: attempts={config.retry_attempts}, delay={config.retry_delay}s",
    ]

    if config.headers:
        lines.append(f"  headers: {', '.join(sorted(config.headers))}")

    if config.logging:
        lines.append(
            f"  logging: level={config.logging.level.value}, "
            f"format={config.logging.format.value}, "
            f"console={config.logging.enable_console}, "
            f"file={config.logging.file_path if config.logging.enable_file else 'disabled'}"
        )
    else:
        lines.append("  logging: disabled")

    return "\n".join(lines)
