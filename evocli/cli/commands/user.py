"""
User Commands.

Account information, permissions and SSH keys.
"""

import typer

from evocli.cli import render
from evocli.cli.runner import run_operation

app = typer.Typer(help="Account commands")


@app.command()
def sshkeys(ctx: typer.Context) -> None:
    """
    List the SSH keys stored on the account.

    Examples:
        evocli user sshkeys
    """
    run_operation(ctx, lambda client: client.list_ssh_keys(), render.render_ssh_keys)


@app.command()
def permissions(ctx: typer.Context) -> None:
    """
    Show the account's EVO permissions.

    Examples:
        evocli user permissions
    """
    run_operation(ctx, lambda client: client.get_evo_permissions(), render.render_permissions)


@app.command()
def info(ctx: typer.Context) -> None:
    """
    Show account details and credit.

    Examples:
        evocli user info
    """
    run_operation(ctx, lambda client: client.get_user_info(), render.render_user_info)
