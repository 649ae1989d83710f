"""
EVO CLI.

Command-line client for the Alice EVO cloud API.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    evocli --help                                  # Show help
    evocli                                         # Interactive menu
    evocli --token ID:SECRET shell                 # Interactive menu, explicit token

    # Instances
    evocli instance list
    evocli instance deploy -p 10 -o 5 --time 24
    evocli instance destroy 42
    evocli instance power 42 restart
    evocli instance rebuild 42 -o 7
    evocli instance renew 42 --time 24
    evocli instance state 42

    # Plans
    evocli plan list
    evocli plan os 10

    # Account
    evocli user sshkeys
    evocli user permissions
    evocli user info

    # Remote commands
    evocli command exec 42 "uptime"
    evocli command result UID

Options:
    --token, -t       API bearer token (or ALICE_API_TOKEN / config/.env)
    --strict-status   Treat a non-2xx status inside the response envelope as an error
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import asyncio
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from evocli.cli.commands import command_app, instance_app, plan_app, user_app
from evocli.cli.runner import CliState, create_client, get_state, require_session
from evocli.cli.shell import run_shell
from evocli.core.exceptions import ApplicationError
from evocli.core.logging import get_logger, setup_logging

app = typer.Typer(
    name="evocli",
    help="EVO CLI - manage Alice EVO instances, plans and account from the terminal.",
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(instance_app, name="instance")
app.add_typer(plan_app, name="plan")
app.add_typer(user_app, name="user")
app.add_typer(command_app, name="command")


def _start_shell(state: CliState) -> None:
    session = require_session(state)
    asyncio.run(run_shell(create_client(session), state.console))


@app.command()
def shell(ctx: typer.Context) -> None:
    """
    Start interactive menu mode.

    Numbered menu over every API operation; 0 exits.
    """
    _start_shell(get_state(ctx))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        envvar="ALICE_API_TOKEN",
        help="API bearer token (prompted for when missing)",
        show_envvar=True,
    ),
    strict_status: bool = typer.Option(
        False,
        "--strict-status",
        help="Fail when the response envelope reports a non-2xx status",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    EVO CLI.

    Run without a command for the interactive menu, or use the instance,
    plan, user and command groups for one-shot calls.
    """
    try:
        if debug:
            setup_logging(level="DEBUG")
            console.print("[dim]Debug mode enabled[/dim]")
        elif verbose:
            setup_logging(level="INFO")
        else:
            setup_logging()
    except ApplicationError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", command=ctx.invoked_subcommand)

    ctx.obj = CliState(console=console, token=token, strict_status=strict_status)

    if ctx.invoked_subcommand is None:
        _start_shell(ctx.obj)


if __name__ == "__main__":
    app()
