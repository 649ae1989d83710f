"""
Interactive Menu Shell.

Numbered menu driving the twelve API operations, one request at a time.
Errors from a single operation are printed and the menu comes back; only
option 0 (or end of input, even inside an operation's prompts) leaves the
loop. Ctrl+C cancels the current operation and returns to the menu.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import NamedTuple

from rich.console import Console
from rich.markup import escape

from evocli.api.client import EvoClient
from evocli.api.schemas import PowerAction
from evocli.cli import render
from evocli.core.exceptions import ClientError
from evocli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class MenuEntry(NamedTuple):
    label: str
    handler: Callable[[], Awaitable[None]]


class MenuShell:
    """
    REPL over the EVO API.

    Usage:
        async with EvoClient(session) as client:
            await MenuShell(client, console).run()
    """

    def __init__(
        self,
        client: EvoClient,
        console: Console,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        """
        Initialize the shell.

        Args:
            client: API client; closed when the loop ends.
            console: Output console.
            prompt: Reads one line of input; defaults to console.input.
        """
        self.client = client
        self.console = console
        self.prompt = prompt or console.input
        self.running = False
        self.entries: dict[int, MenuEntry] = {
            1: MenuEntry("List instances", self._list_instances),
            2: MenuEntry("Deploy instance", self._deploy_instance),
            3: MenuEntry("Destroy instance", self._destroy_instance),
            4: MenuEntry("Power action", self._power_instance),
            5: MenuEntry("Rebuild instance", self._rebuild_instance),
            6: MenuEntry("List plans", self._list_plans),
            7: MenuEntry("Get OS by plan", self._get_os_by_plan),
            8: MenuEntry("Renew instance", self._renew_instance),
            9: MenuEntry("Get instance state", self._get_instance_state),
            10: MenuEntry("List SSH keys", self._list_ssh_keys),
            11: MenuEntry("Get EVO permissions", self._get_evo_permissions),
            12: MenuEntry("Get user info", self._get_user_info),
        }

    async def run(self) -> None:
        """Run the menu loop until option 0 or end of input."""
        self.running = True

        try:
            while self.running:
                self._print_menu()
                try:
                    choice_text = self.prompt("\nEnter option number: ").strip()
                except KeyboardInterrupt:
                    self.console.print("\n[dim]Use 0 to exit[/dim]")
                    continue
                except EOFError:
                    break

                await self._dispatch(choice_text)
        finally:
            await self.client.close()

        self.console.print("[dim]Exiting...[/dim]")

    async def _dispatch(self, choice_text: str) -> None:
        try:
            choice = int(choice_text)
        except ValueError:
            self.console.print("[red]Error: invalid input, please enter a number.[/red]")
            return

        if choice == 0:
            self.running = False
            return

        entry = self.entries.get(choice)
        if entry is None:
            self.console.print(f"[red]Error: invalid option {choice}[/red]")
            return

        log_with_source(logger, "shell", "debug", "Menu option selected", option=choice, label=entry.label)

        try:
            await entry.handler()
        except ClientError as e:
            log_with_source(logger, "shell", "info", "Operation failed", option=choice, code=e.code)
            render.render_error(self.console, e)
        except ValueError as e:
            self.console.print(f"[red]Error: {escape(str(e))}[/red]")
        except EOFError:
            log_with_source(logger, "shell", "debug", "Input closed during operation", option=choice)
            self.running = False
        except KeyboardInterrupt:
            self._cancelled(choice)
        except asyncio.CancelledError:
            # Ctrl+C while a request is in flight cancels the main task
            task = asyncio.current_task()
            if task is None or task.uncancel() > 0:
                raise
            self._cancelled(choice)

    def _cancelled(self, choice: int) -> None:
        log_with_source(logger, "shell", "info", "Operation cancelled", option=choice)
        self.console.print("\n[yellow]Operation cancelled.[/yellow]")

    def _print_menu(self) -> None:
        self.console.print("\n[bold]Choose an operation:[/bold]")
        for number, entry in self.entries.items():
            self.console.print(f" [cyan]{number:>2}[/cyan]. {entry.label}")
        self.console.print(f" [cyan]{0:>2}[/cyan]. Exit")

    def _ask(self, label: str) -> str:
        return self.prompt(f"{label}: ").strip()

    def _ask_optional(self, label: str) -> str | None:
        return self._ask(f"{label} (optional, press Enter to skip)") or None

    # -------------------------------------------------------------------------
    # Instances
    # -------------------------------------------------------------------------

    async def _list_instances(self) -> None:
        render.render_instances(self.console, await self.client.list_instances())

    async def _deploy_instance(self) -> None:
        product_id = self._ask("Product ID")
        os_id = self._ask("Operating system ID")
        time = self._ask("Duration (hours)")
        ssh_key = self._ask_optional("SSH key ID")
        result = await self.client.deploy_instance(product_id, os_id, time, ssh_key=ssh_key)
        render.render_deploy(self.console, result)

    async def _destroy_instance(self) -> None:
        instance_id = self._ask("Instance ID to destroy")
        render.render_acknowledgement(self.console, await self.client.destroy_instance(instance_id))

    async def _power_instance(self) -> None:
        instance_id = self._ask("Instance ID")
        choices = ", ".join(action.value for action in PowerAction)
        action = self._ask(f"Power action ({choices})")
        render.render_acknowledgement(self.console, await self.client.power_instance(instance_id, action))

    async def _rebuild_instance(self) -> None:
        instance_id = self._ask("Instance ID to rebuild")
        os_id = self._ask("New operating system ID")
        ssh_key = self._ask_optional("SSH key ID")
        result = await self.client.rebuild_instance(instance_id, os_id, ssh_key=ssh_key)
        render.render_rebuild(self.console, result)

    async def _renew_instance(self) -> None:
        instance_id = self._ask("Instance ID to renew")
        time = self._ask("Renewal duration (hours)")
        render.render_renewal(self.console, await self.client.renew_instance(instance_id, time))

    async def _get_instance_state(self) -> None:
        instance_id = self._ask("Instance ID")
        render.render_state(self.console, await self.client.get_instance_state(instance_id))

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    async def _list_plans(self) -> None:
        render.render_plans(self.console, await self.client.list_plans())

    async def _get_os_by_plan(self) -> None:
        plan_id = self._ask("Plan ID")
        render.render_os_groups(self.console, await self.client.get_os_by_plan(plan_id))

    # -------------------------------------------------------------------------
    # User
    # -------------------------------------------------------------------------

    async def _list_ssh_keys(self) -> None:
        render.render_ssh_keys(self.console, await self.client.list_ssh_keys())

    async def _get_evo_permissions(self) -> None:
        render.render_permissions(self.console, await self.client.get_evo_permissions())

    async def _get_user_info(self) -> None:
        render.render_user_info(self.console, await self.client.get_user_info())


async def run_shell(client: EvoClient, console: Console) -> None:
    """Run the interactive menu."""
    shell = MenuShell(client, console)
    await shell.run()
