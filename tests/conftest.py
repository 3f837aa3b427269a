"""
Pytest configuration and fixtures for chatroutes tests.
"""

from unittest.mock import AsyncMock, Mock

import pytest
import responses as responses_lib

from chatroutes.client import ChatRoutesClient
from chatroutes.core.config import ClientConfig
from chatroutes.core.logging.config import LoggingConfig

API_KEY = "cr_test_key_123456"


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.chatroutes.test"


@pytest.fixture
def config(base_url):
    """Client config with the default retry budget (3 retries, 1s base delay)."""
    return ClientConfig(api_key=API_KEY, base_url=base_url)


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def sleep():
    """Recorded replacement for time.sleep."""
    return Mock()


@pytest.fixture
def async_sleep():
    """Recorded replacement for asyncio.sleep."""
    return AsyncMock()


@pytest.fixture
def client(config, sleep):
    """Sync client whose backoff does not actually sleep."""
    client = ChatRoutesClient(config=config, sleep=sleep)
    yield client
    client.close()


@pytest.fixture
def logging_config():
    """
    LoggingConfig fixture for testing.

    Example:
        def test_with_logging(logging_config):
            config = ClientConfig.create(api_key="...", logging=logging_config)
    """
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "chatroutes.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
