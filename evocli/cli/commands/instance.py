"""
Instance Commands.

Lifecycle operations on EVO instances.
"""

from pathlib import Path
from typing import Optional

import typer

from evocli.api.schemas import PowerAction
from evocli.cli import render
from evocli.cli.runner import run_operation

app = typer.Typer(help="Instance lifecycle commands")


def _read_boot_script(path: Optional[Path]) -> str | None:
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise typer.BadParameter("file is not valid UTF-8 text", param_hint="'--boot-script'") from None


@app.command("list")
def list_instances(ctx: typer.Context) -> None:
    """
    List all instances.

    Examples:
        evocli instance list
    """
    run_operation(ctx, lambda client: client.list_instances(), render.render_instances)


@app.command()
def deploy(
    ctx: typer.Context,
    product_id: str = typer.Option(..., "--product-id", "-p", help="Plan (product) ID"),
    os_id: str = typer.Option(..., "--os-id", "-o", help="Operating system ID"),
    time: str = typer.Option(..., "--time", help="Duration in hours"),
    ssh_key: Optional[str] = typer.Option(None, "--ssh-key", "-k", help="SSH key ID"),
    boot_script: Optional[Path] = typer.Option(
        None, "--boot-script", exists=True, dir_okay=False, help="Script file run on first boot",
    ),
) -> None:
    """
    Deploy a new instance.

    Examples:
        evocli instance deploy -p 10 -o 5 --time 24
        evocli instance deploy -p 10 -o 5 --time 24 -k 3 --boot-script init.sh
    """
    script = _read_boot_script(boot_script)
    run_operation(
        ctx,
        lambda client: client.deploy_instance(product_id, os_id, time, ssh_key=ssh_key, boot_script=script),
        render.render_deploy,
    )


@app.command()
def destroy(
    ctx: typer.Context,
    instance_id: str = typer.Argument(..., help="Instance ID"),
) -> None:
    """
    Destroy an instance.

    Examples:
        evocli instance destroy 42
    """
    run_operation(ctx, lambda client: client.destroy_instance(instance_id), render.render_acknowledgement)


@app.command()
def power(
    ctx: typer.Context,
    instance_id: str = typer.Argument(..., help="Instance ID"),
    action: PowerAction = typer.Argument(..., help="Power action"),
) -> None:
    """
    Run a power action on an instance.

    Examples:
        evocli instance power 42 restart
    """
    run_operation(ctx, lambda client: client.power_instance(instance_id, action), render.render_acknowledgement)


@app.command()
def rebuild(
    ctx: typer.Context,
    instance_id: str = typer.Argument(..., help="Instance ID"),
    os_id: str = typer.Option(..., "--os-id", "-o", help="New operating system ID"),
    ssh_key: Optional[str] = typer.Option(None, "--ssh-key", "-k", help="SSH key ID"),
    boot_script: Optional[Path] = typer.Option(
        None, "--boot-script", exists=True, dir_okay=False, help="Script file run on first boot",
    ),
) -> None:
    """
    Reinstall an instance with a new operating system.

    Examples:
        evocli instance rebuild 42 -o 7
        evocli instance rebuild 42 -o 7 -k 3
    """
    script = _read_boot_script(boot_script)
    run_operation(
        ctx,
        lambda client: client.rebuild_instance(instance_id, os_id, ssh_key=ssh_key, boot_script=script),
        render.render_rebuild,
    )


@app.command()
def renew(
    ctx: typer.Context,
    instance_id: str = typer.Argument(..., help="Instance ID"),
    time: str = typer.Option(..., "--time", help="Hours to add"),
) -> None:
    """
    Extend an instance's service time.

    Examples:
        evocli instance renew 42 --time 24
    """
    run_operation(ctx, lambda client: client.renew_instance(instance_id, time), render.render_renewal)


@app.command()
def state(
    ctx: typer.Context,
    instance_id: str = typer.Argument(..., help="Instance ID"),
) -> None:
    """
    Show an instance's runtime state (memory, traffic, OS).

    Examples:
        evocli instance state 42
    """
    run_operation(ctx, lambda client: client.get_instance_state(instance_id), render.render_state)
