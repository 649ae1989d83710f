"""
Result Rendering.

Rich output for every payload shape and for client errors. Renderers only
format; they never call the API.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from evocli.api.schemas import (
    Acknowledgement,
    CommandResult,
    CommandTask,
    DeployResult,
    EVOPermissions,
    Instance,
    InstanceState,
    OSGroup,
    Plan,
    RebuildResult,
    RenewalResult,
    SSHKey,
    UserInfo,
)
from evocli.core.exceptions import (
    ClientError,
    EnvelopeDecodeError,
    EnvelopeStatusError,
    HTTPStatusError,
    NetworkError,
    PayloadDecodeError,
    RequestTimeoutError,
)

PUBLIC_KEY_PREVIEW = 40


def kb_to_gb(kb: str) -> float:
    """Convert a kB figure sent as a string; unparsable values count as 0."""
    try:
        return float(kb) / 1024 / 1024
    except ValueError:
        return 0.0


def bytes_to_mb(value: int) -> float:
    return value / 1024 / 1024


def _details(rows: list[tuple[str, str]]) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()
    for label, value in rows:
        table.add_row(label, escape(value))
    return table


def render_instances(console: Console, instances: Sequence[Instance]) -> None:
    if not instances:
        console.print("[yellow]No instances found.[/yellow]")
        return

    table = Table(title="Instances", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Hostname")
    table.add_column("IPv4")
    table.add_column("Status")
    table.add_column("Spec")
    table.add_column("OS / Region")
    table.add_column("Password")
    table.add_column("Expires")

    for inst in instances:
        table.add_row(
            str(inst.id),
            escape(inst.hostname),
            inst.ipv4,
            inst.status,
            f"{inst.cpu} CPU / {inst.memory}MB RAM / {inst.disk}GB {inst.disk_type}",
            f"{inst.os} / {inst.region}",
            inst.password,
            inst.expiration_at,
        )

    console.print(table)


def render_deploy(console: Console, result: DeployResult) -> None:
    console.print(Panel(
        _details([
            ("ID", result.id),
            ("Hostname", result.hostname),
            ("IPv4", result.ipv4),
            ("IPv6", result.ipv6),
            ("Password", result.password),
        ]),
        title="Instance deployed",
        border_style="green",
    ))


def render_acknowledgement(console: Console, ack: Acknowledgement) -> None:
    console.print(f"[green]Operation succeeded:[/green] {escape(ack.message)}")


def render_rebuild(console: Console, result: RebuildResult) -> None:
    console.print(Panel(
        _details([
            ("Hostname", result.hostname),
            ("IPv4", result.ipv4),
            ("IPv6", result.ipv6),
            ("New password", result.password),
        ]),
        title="Instance rebuilt",
        border_style="green",
    ))


def _add_os_groups(parent: Tree, groups: Sequence[OSGroup]) -> None:
    for group in groups:
        branch = parent.add(f"[bold]{escape(group.group_name)}[/bold]")
        for image in group.os_list:
            branch.add(f"[cyan]{image.id}[/cyan]  {escape(image.name)}")


def render_plans(console: Console, plans: Sequence[Plan]) -> None:
    if not plans:
        console.print("[yellow]No plans available.[/yellow]")
        return

    for plan in plans:
        tree = Tree(
            f"[bold cyan]{plan.id}[/bold cyan]  [bold]{escape(plan.name)}[/bold]  "
            f"(stock: {plan.stock})"
        )
        tree.add(f"{plan.cpu} CPU / {plan.memory}MB RAM / {plan.disk}GB Disk")
        tree.add(f"Network: {escape(plan.network_speed)}")
        _add_os_groups(tree.add("Operating systems"), plan.os)
        console.print(tree)


def render_os_groups(console: Console, groups: Sequence[OSGroup]) -> None:
    if not groups:
        console.print("[yellow]No operating systems available.[/yellow]")
        return

    tree = Tree("[bold]Available operating systems[/bold]")
    _add_os_groups(tree, groups)
    console.print(tree)


def render_renewal(console: Console, result: RenewalResult) -> None:
    console.print(Panel(
        _details([
            ("New expiration", result.expiration_at),
            ("Hours added", result.added_hours),
            ("Total service hours", str(result.total_service_hours)),
        ]),
        title="Instance renewed",
        border_style="green",
    ))


def render_state(console: Console, state: InstanceState) -> None:
    memory = state.state.memory
    traffic = state.state.traffic
    console.print(Panel(
        _details([
            ("Name", state.name),
            ("Status", f"{state.status} ({state.state.state})"),
            ("OS", f"{state.system.name} ({state.system.group_name})"),
            ("Memory", f"{kb_to_gb(memory.memavailable):.2f} / {kb_to_gb(memory.memtotal):.2f} GB available"),
            ("Traffic in/out/total", (
                f"{bytes_to_mb(traffic.inbound):.2f} / {bytes_to_mb(traffic.outbound):.2f} / "
                f"{bytes_to_mb(traffic.total):.2f} MB"
            )),
        ]),
        title="Instance state",
    ))


def render_ssh_keys(console: Console, keys: Sequence[SSHKey]) -> None:
    if not keys:
        console.print("[yellow]No SSH keys found.[/yellow]")
        return

    table = Table(title="SSH Keys", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Public key")

    for key in keys:
        preview = key.publickey[:PUBLIC_KEY_PREVIEW]
        if len(key.publickey) > PUBLIC_KEY_PREVIEW:
            preview += "..."
        table.add_row(str(key.id), escape(key.name), key.created_at, escape(preview))

    console.print(table)


def render_permissions(console: Console, perms: EVOPermissions) -> None:
    console.print(Panel(
        _details([
            ("User ID", str(perms.user_id)),
            ("Plan", perms.plan),
            ("Max time", f"{perms.max_time} hours"),
            ("Allowed packages", perms.allow_packages),
        ]),
        title="EVO permissions",
    ))


def render_user_info(console: Console, info: UserInfo) -> None:
    console.print(Panel(
        _details([
            ("ID", str(info.id)),
            ("Username", info.username),
            ("Email", info.email),
            ("Credit", str(info.credit)),
        ]),
        title="User info",
    ))


def _extra_rows(payload: CommandTask | CommandResult) -> list[tuple[str, str]]:
    return [(escape(name), str(value)) for name, value in payload.extra_fields().items()]


def render_command_task(console: Console, task: CommandTask) -> None:
    console.print(Panel(
        _details([("Command UID", task.command_uid or "-"), *_extra_rows(task)]),
        title="Command queued",
        border_style="green",
    ))


def render_command_result(console: Console, result: CommandResult) -> None:
    """Print any status fields, then the command output verbatim."""
    rows = _extra_rows(result)
    if rows:
        console.print(_details(rows))
    console.print(Panel(escape(result.output) or "[dim](no output)[/dim]", title="Command output"))


def render_error(console: Console, error: ClientError) -> None:
    """Print one line describing which stage of the call failed."""
    if isinstance(error, RequestTimeoutError):
        console.print(f"[red]Timeout:[/red] {escape(error.message)}")
    elif isinstance(error, NetworkError):
        console.print(f"[red]Network error:[/red] {escape(error.message)}")
    elif isinstance(error, HTTPStatusError):
        console.print(f"[red]API error:[/red] status {error.status_code}, body: {escape(error.body_text)}")
    elif isinstance(error, EnvelopeStatusError):
        console.print(f"[red]API reported failure ({error.status}):[/red] {escape(error.api_message)}")
    elif isinstance(error, EnvelopeDecodeError):
        console.print(f"[red]Could not parse response:[/red] {escape(error.message)}")
    elif isinstance(error, PayloadDecodeError):
        console.print(f"[red]Unexpected {escape(error.shape)} data:[/red] {escape(error.message)}")
    else:
        console.print(f"[red]Error:[/red] {escape(error.message)}")
