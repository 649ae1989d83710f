"""
HTTP Transport.

Builds authenticated requests against the API and returns raw response
bodies. Knows nothing about JSON or payload shapes.

Every request carries "Authorization: Bearer <token>". Two request shapes
exist: a bodyless GET and a multipart/form-data POST of string fields. Both
go through Transport.execute.

Usage:
    async with Transport(session) as transport:
        body = await transport.execute(RequestDescriptor.get("/Evo/Plan"))
        body = await transport.execute(
            RequestDescriptor.post("/Evo/Destroy", id="42"),
        )
"""

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType, TracebackType
from typing import Any

import httpx

from evocli.api.session import ClientSession
from evocli.core.exceptions import HTTPStatusError, NetworkError, RequestTimeoutError
from evocli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


def encode_form(fields: Mapping[str, Any]) -> dict[str, str]:
    """
    Drop absent fields and stringify the rest.

    Only None means "not supplied". An empty string is a value and is sent
    as an empty field; optional parameters map "" to None before this.
    """
    return {name: str(value) for name, value in fields.items() if value is not None}


@dataclass(frozen=True)
class RequestDescriptor:
    """One API call: method, path and optional form fields."""

    method: str
    path: str
    form: Mapping[str, str] | None = None

    @classmethod
    def get(cls, path: str) -> "RequestDescriptor":
        return cls("GET", path)

    @classmethod
    def post(cls, path: str, **fields: Any) -> "RequestDescriptor":
        return cls("POST", path, MappingProxyType(encode_form(fields)))

    def multipart_files(self) -> dict[str, tuple[None, str]] | None:
        """Form fields in the httpx ``files`` layout, without filenames."""
        if self.form is None:
            return None
        return {name: (None, value) for name, value in self.form.items()}


class Transport:
    """
    Executes request descriptors for one client session.

    The underlying httpx.AsyncClient is created on first use and reused as
    a connection pool until close().
    """

    def __init__(
        self,
        session: ClientSession,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            session: Immutable session (base URL, token, timeout).
            http_transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
        """
        self.session = session
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.session.base_url,
                timeout=self.session.timeout,
                headers={"Authorization": self.session.auth_header},
                follow_redirects=True,
                transport=self._http_transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def execute(self, request: RequestDescriptor) -> bytes:
        """
        Send a request and return the raw response body.

        Args:
            request: Method, path and optional form fields.

        Returns:
            The response body for any status in [200, 400).

        Raises:
            RequestTimeoutError: The request exceeded the session timeout.
            NetworkError: No HTTP response was received.
            HTTPStatusError: The API answered with status >= 400.
        """
        client = await self._get_client()

        log_with_source(
            logger,
            "api",
            "debug",
            "API request",
            method=request.method,
            path=request.path,
            fields=sorted(request.form) if request.form else [],
        )

        started = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.request(
                    request.method,
                    request.path,
                    files=request.multipart_files(),
                ),
                timeout=self.session.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            log_with_source(
                logger, "api", "warning", "API request timed out",
                method=request.method, path=request.path, timeout=self.session.timeout,
            )
            raise RequestTimeoutError(self.session.timeout, cause=e) from e
        except httpx.RequestError as e:
            log_with_source(
                logger, "api", "warning", "API request failed",
                method=request.method, path=request.path, error=str(e),
            )
            raise NetworkError(f"Request failed: {e}", cause=e) from e

        log_with_source(
            logger,
            "api",
            "debug",
            "API response",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000),
        )

        if response.status_code >= 400:
            raise HTTPStatusError(response.status_code, response.content)

        return response.content
