"""
Remote Command Commands.

Queue shell commands on an instance and fetch their output.
"""

import typer

from evocli.cli import render
from evocli.cli.runner import run_operation

app = typer.Typer(help="Remote command execution")


@app.command("exec")
def execute(
    ctx: typer.Context,
    server_id: str = typer.Argument(..., help="Instance ID"),
    command: str = typer.Argument(..., help="Shell command to run"),
) -> None:
    """
    Queue a shell command on an instance.

    Prints the command UID to pass to `evocli command result`.

    Examples:
        evocli command exec 42 "uptime"
    """
    run_operation(ctx, lambda client: client.execute_command(server_id, command), render.render_command_task)


@app.command()
def result(
    ctx: typer.Context,
    command_uid: str = typer.Argument(..., help="UID returned by exec"),
    base64_output: bool = typer.Option(False, "--base64", help="Ask the API for base64-encoded output"),
) -> None:
    """
    Show the output of a queued command.

    Examples:
        evocli command result 3f2a9c
        evocli command result 3f2a9c --base64
    """
    run_operation(
        ctx,
        lambda client: client.get_command_result(command_uid, output_base64=base64_output),
        render.render_command_result,
    )
