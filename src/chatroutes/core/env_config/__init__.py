"""
Environment configuration for the ChatRoutes client.

Example:
    >>> from chatroutes.core.env_config import load_from_env
    >>>
    >>> # Load from environment and .env
    >>> config = load_from_env()
    >>>
    >>> # Load with overrides
    >>> config = load_from_env(env_file=".env.staging", retry_attempts=5)
"""

from .loader import load_from_env, config_summary
from .validator import ChatRoutesSettings
from .secrets import mask_secret

__all__ = [
    "load_from_env",
    "config_summary",
    "ChatRoutesSettings",
    "mask_secret",
]
