"""
Command Runner.

Glue between synchronous Typer commands and the async API client: resolves
the session on first use, opens a client for it, awaits one operation and
renders the result or the error.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from evocli.api.client import EvoClient
from evocli.api.session import ClientSession, build_session
from evocli.cli.render import render_error
from evocli.core.config import get_settings
from evocli.core.exceptions import ApplicationError, AuthenticationError, ClientError
from evocli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")

TOKEN_PROMPT = "Enter your API bearer token (API Client ID:Secret): "


def resolve_token(console: Console, token: str | None) -> str:
    """
    Resolve the API token: option/env first, then config/.env, then a prompt.

    Raises:
        AuthenticationError: No token was supplied anywhere.
    """
    resolved = (token or get_settings().alice_api_token).strip()
    if not resolved:
        try:
            resolved = console.input(TOKEN_PROMPT).strip()
        except EOFError:
            resolved = ""
    if not resolved:
        raise AuthenticationError("API token not provided")
    return resolved


@dataclass
class CliState:
    """
    Per-invocation state stored on the Typer context.

    The session is built on first use, so --help on any subcommand works
    without a token.
    """

    console: Console
    token: str | None = None
    strict_status: bool = False
    _session: ClientSession | None = field(default=None, init=False, repr=False)

    def get_session(self) -> ClientSession:
        """
        Build the session once and return it on every later call.

        Raises:
            AuthenticationError: No token could be resolved.
            ConfigurationError: The settings files are invalid.
        """
        if self._session is None:
            self._session = build_session(
                resolve_token(self.console, self.token),
                enforce_envelope_status=True if self.strict_status else None,
            )
            logger.debug("Session ready", base_url=self._session.base_url)
        return self._session


def create_client(session: ClientSession) -> EvoClient:
    """Create the API client for a session."""
    return EvoClient(session)


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_object(CliState)
    if state is None:
        raise RuntimeError("CLI state missing; the root callback did not run")
    return state


def require_session(state: CliState) -> ClientSession:
    """Get the session, or print the reason and exit with code 1."""
    try:
        return state.get_session()
    except ApplicationError as e:
        log_with_source(logger, "cli", "info", "Session unavailable", code=e.code)
        state.console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(1)


async def _execute(
    session: ClientSession,
    operation: Callable[[EvoClient], Awaitable[ResultT]],
) -> ResultT:
    async with create_client(session) as client:
        return await operation(client)


def run_operation(
    ctx: typer.Context,
    operation: Callable[[EvoClient], Awaitable[ResultT]],
    renderer: Callable[[Console, ResultT], Any],
) -> None:
    """
    Run one API operation and render its result.

    Client errors are rendered and end the command with exit code 1.
    """
    state = get_state(ctx)
    session = require_session(state)

    try:
        result = asyncio.run(_execute(session, operation))
    except ClientError as e:
        log_with_source(logger, "cli", "info", "Operation failed", code=e.code, error=e.message)
        render_error(state.console, e)
        raise typer.Exit(1)

    renderer(state.console, result)
