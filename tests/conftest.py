"""
Root Pytest Fixtures.

Shared fixtures available to all test types.
"""

import logging

import pytest

from evocli.core.config import get_app_config, get_settings


# =============================================================================
# Configuration Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """
    Keep the developer's environment out of the tests.

    Clears the API variables and the cached settings before and after
    each test, so one test's configuration never leaks into the next.
    """
    for name in ("ALICE_API_TOKEN", "ALICE_API_BASE_URL", "EVOCLI_CONFIG_DIR"):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
