"""Unit tests for the interactive menu shell."""

import asyncio
import io
from collections.abc import Callable, Iterable

import pytest
from rich.console import Console

from evocli.api.client import EvoClient
from evocli.cli.shell import MenuShell


def scripted(lines: Iterable[str]) -> Callable[[str], str]:
    """Prompt that answers from a script, then signals end of input."""
    answers = iter(lines)

    def prompt(message: str) -> str:
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    return prompt


@pytest.fixture
def console() -> Console:
    """Wide, colorless console writing to a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None)


def output(console: Console) -> str:
    return console.file.getvalue()


class TestMenuLoop:
    """Tests for menu navigation."""

    @pytest.mark.asyncio
    async def test_menu_lists_all_operations(self, evo_client: EvoClient, console: Console) -> None:
        """Test the menu shows options 1 to 12 and exit."""
        shell = MenuShell(evo_client, console, prompt=scripted(["0"]))
        await shell.run()

        text = output(console)
        assert "12. Get user info" in text
        assert "0. Exit" in text
        assert "Exiting..." in text
        assert len(shell.entries) == 12

    @pytest.mark.asyncio
    async def test_invalid_input_reprompts(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        """Test non-numeric input prints an error and keeps looping."""
        shell = MenuShell(evo_client, console, prompt=scripted(["abc", "0"]))
        await shell.run()

        assert "Error: invalid input, please enter a number." in output(console)
        assert mock_api.requests == []

    @pytest.mark.asyncio
    async def test_unknown_option(self, evo_client: EvoClient, console: Console) -> None:
        """Test out-of-range numbers are rejected."""
        await MenuShell(evo_client, console, prompt=scripted(["13", "-1", "0"])).run()

        text = output(console)
        assert "Error: invalid option 13" in text
        assert "Error: invalid option -1" in text

    @pytest.mark.asyncio
    async def test_end_of_input_exits(self, evo_client: EvoClient, console: Console) -> None:
        """Test EOF leaves the loop like option 0."""
        await MenuShell(evo_client, console, prompt=scripted([])).run()
        assert "Exiting..." in output(console)

    @pytest.mark.asyncio
    async def test_interrupt_keeps_looping(self, evo_client: EvoClient, console: Console) -> None:
        """Test Ctrl+C at the prompt does not exit."""
        answers = iter(["interrupt", "0"])

        def prompt(message: str) -> str:
            answer = next(answers)
            if answer == "interrupt":
                raise KeyboardInterrupt
            return answer

        await MenuShell(evo_client, console, prompt=prompt).run()
        assert "Use 0 to exit" in output(console)

    @pytest.mark.asyncio
    async def test_client_closed_on_exit(self, evo_client: EvoClient, console: Console) -> None:
        """Test the client's connection pool is released."""
        await evo_client._transport._get_client()
        await MenuShell(evo_client, console, prompt=scripted(["0"])).run()
        assert evo_client._transport._client is None


class TestMenuOperations:
    """Tests for menu-driven API calls."""

    @pytest.mark.asyncio
    async def test_list_instances(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        mock_api.reply("/Evo/Instance", data=[{"id": 7, "hostname": "web-1"}])

        await MenuShell(evo_client, console, prompt=scripted(["1", "0"])).run()

        assert "web-1" in output(console)

    @pytest.mark.asyncio
    async def test_deploy_skips_blank_ssh_key(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        """Test a blank optional answer is not sent."""
        mock_api.reply("/Evo/Deploy", data={"id": "i-1", "ipv4": "1.2.3.4"})

        await MenuShell(evo_client, console, prompt=scripted(["2", "10", "5", "24", "", "0"])).run()

        assert mock_api.sent_fields() == {"product_id": "10", "os_id": "5", "time": "24"}
        assert "1.2.3.4" in output(console)

    @pytest.mark.asyncio
    async def test_destroy(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        mock_api.reply("/Evo/Destroy", data=None, message="destroyed")

        await MenuShell(evo_client, console, prompt=scripted(["3", "99", "0"])).run()

        assert mock_api.sent_fields() == {"id": "99"}
        assert "Operation succeeded: destroyed" in output(console)

    @pytest.mark.asyncio
    async def test_invalid_power_action(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        """Test a bad action is reported and nothing is sent."""
        await MenuShell(evo_client, console, prompt=scripted(["4", "7", "reboot", "0"])).run()

        assert "Error:" in output(console)
        assert "reboot" in output(console)
        assert mock_api.requests == []

    @pytest.mark.asyncio
    async def test_error_returns_to_menu(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        """Test a failed call is printed and the next option still runs."""
        mock_api.reply_raw("/User/Info", b"Unauthorized", http_status=401)
        mock_api.reply("/User/SSHKey", data=None)

        await MenuShell(evo_client, console, prompt=scripted(["12", "10", "0"])).run()

        text = output(console)
        assert "API error: status 401, body: Unauthorized" in text
        assert "No SSH keys found." in text

    @pytest.mark.asyncio
    async def test_os_by_plan(self, evo_client: EvoClient, console: Console, mock_api) -> None:
        mock_api.reply("/Evo/getOSByPlan", data=[{"group_name": "Debian", "os_list": [{"id": 5, "name": "Debian 12"}]}])

        await MenuShell(evo_client, console, prompt=scripted(["7", "10", "0"])).run()

        assert mock_api.sent_fields() == {"plan_id": "10"}
        assert "Debian 12" in output(console)


class TestInterruptedOperations:
    """Tests for input ending or Ctrl+C inside an operation."""

    @pytest.mark.asyncio
    async def test_end_of_input_in_operation_prompt(
        self, evo_client: EvoClient, console: Console, mock_api,
    ) -> None:
        """Test EOF at an operation's own prompt exits cleanly."""
        shell = MenuShell(evo_client, console, prompt=scripted(["3"]))
        await shell.run()

        assert shell.running is False
        assert "Exiting..." in output(console)
        assert mock_api.requests == []

    @pytest.mark.asyncio
    async def test_interrupt_in_operation_prompt(
        self, evo_client: EvoClient, console: Console, mock_api,
    ) -> None:
        """Test Ctrl+C at an operation's prompt cancels only that operation."""
        mock_api.reply("/User/Info", data={"id": 1, "username": "alice"})
        answers = iter(["3", "interrupt", "12", "0"])

        def prompt(message: str) -> str:
            answer = next(answers)
            if answer == "interrupt":
                raise KeyboardInterrupt
            return answer

        await MenuShell(evo_client, console, prompt=prompt).run()

        text = output(console)
        assert "Operation cancelled." in text
        assert "alice" in text
        assert [request.url.path for request in mock_api.requests] == ["/cli/v1/User/Info"]

    @pytest.mark.asyncio
    async def test_interrupt_during_request(
        self, evo_client: EvoClient, console: Console, mock_api,
    ) -> None:
        """Test a request cancelled by Ctrl+C returns to the menu."""
        async def interrupted(request):
            asyncio.current_task().cancel()
            await asyncio.sleep(1)

        mock_api.route("/Evo/Instance", interrupted)
        mock_api.reply("/User/SSHKey", data=None)

        await MenuShell(evo_client, console, prompt=scripted(["1", "10", "0"])).run()

        text = output(console)
        assert "Operation cancelled." in text
        assert "No SSH keys found." in text
        assert "Exiting..." in text
