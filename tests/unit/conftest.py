"""
Unit Test Fixtures.

Fixtures for unit tests - the network is never touched. HTTP traffic goes
through httpx.MockTransport, which routes each request to a canned
response and records it for assertions.
"""

import json
import re
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from evocli.api.client import EvoClient
from evocli.api.session import ClientSession

TEST_BASE_URL = "https://api.test/cli/v1"
TEST_TOKEN = "client-id:secret"

_FORM_FIELD = re.compile(
    rb'Content-Disposition: form-data; name="([^"]+)"[^\r\n]*\r\n'
    rb"(?:[^\r\n]+\r\n)*\r\n"
    rb"(.*?)\r\n--",
    re.S,
)


def make_envelope(data: Any = None, status: int = 200, message: str = "ok") -> bytes:
    """Encode an API response envelope."""
    return json.dumps({"status": status, "message": message, "data": data}).encode()


def form_fields(request: httpx.Request) -> dict[str, str]:
    """Decode the multipart/form-data body of a recorded request."""
    return {
        name.decode(): value.decode()
        for name, value in _FORM_FIELD.findall(request.content)
    }


class MockApi:
    """
    Canned API for httpx.MockTransport.

    Responses are registered per path; unregistered paths answer 404.
    Every request is kept in `requests`, body already read.

    Usage:
        api = MockApi()
        api.reply("/Evo/Plan", data=[])
        client = EvoClient(session, http_transport=api.transport)
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def reply(
        self,
        path: str,
        data: Any = None,
        status: int = 200,
        message: str = "ok",
        http_status: int = 200,
    ) -> None:
        """Answer path with an envelope."""
        body = make_envelope(data, status=status, message=message)
        self._routes[path] = lambda request: httpx.Response(http_status, content=body)

    def reply_raw(self, path: str, content: bytes, http_status: int = 200) -> None:
        """Answer path with an arbitrary body."""
        self._routes[path] = lambda request: httpx.Response(http_status, content=content)

    def fail(self, path: str, error: Callable[[httpx.Request], Exception]) -> None:
        """Raise a transport error for path."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise error(request)
        self._routes[path] = handler

    def route(self, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        """Use a custom (sync or async) handler for path."""
        self._routes[path] = handler

    def _handle(self, request: httpx.Request) -> Any:
        request.read()
        self.requests.append(request)
        path = request.url.path.removeprefix("/cli/v1")
        handler = self._routes.get(path)
        if handler is None:
            return httpx.Response(404, content=b"not found")
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def sent_fields(self) -> dict[str, str]:
        """Form fields of the last request."""
        return form_fields(self.last_request)


# =============================================================================
# Session and Client Fixtures
# =============================================================================


@pytest.fixture
def session() -> ClientSession:
    """Session pointing at the mock API."""
    return ClientSession(base_url=TEST_BASE_URL, token=TEST_TOKEN, timeout=5.0)


@pytest.fixture
def strict_session() -> ClientSession:
    """Session that rejects non-2xx envelope statuses."""
    return ClientSession(
        base_url=TEST_BASE_URL,
        token=TEST_TOKEN,
        timeout=5.0,
        enforce_envelope_status=True,
    )


@pytest.fixture
def envelope() -> Callable[..., bytes]:
    """Envelope encoder: envelope(data, status=200, message="ok")."""
    return make_envelope


@pytest.fixture
def mock_api() -> MockApi:
    """Fresh canned API."""
    return MockApi()


@pytest.fixture
def evo_client(session: ClientSession, mock_api: MockApi) -> EvoClient:
    """EvoClient wired to the canned API."""
    return EvoClient(session, http_transport=mock_api.transport)


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            log_with_source(mock_logger, "api", "info", "message")
            mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger
