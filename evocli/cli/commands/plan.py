"""
Plan Commands.

Plan and operating system catalog lookups.
"""

import typer

from evocli.cli import render
from evocli.cli.runner import run_operation

app = typer.Typer(help="Plan catalog commands")


@app.command("list")
def list_plans(ctx: typer.Context) -> None:
    """
    List all available plans with their operating systems.

    Examples:
        evocli plan list
    """
    run_operation(ctx, lambda client: client.list_plans(), render.render_plans)


@app.command("os")
def os_by_plan(
    ctx: typer.Context,
    plan_id: str = typer.Argument(..., help="Plan ID"),
) -> None:
    """
    List the operating systems available for a plan.

    Examples:
        evocli plan os 10
    """
    run_operation(ctx, lambda client: client.get_os_by_plan(plan_id), render.render_os_groups)
