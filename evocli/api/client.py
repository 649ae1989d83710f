"""
EVO API Client.

One generic call() composes the transport with the envelope decoder; each
API operation is a single instantiation of it: a request descriptor and
the expected payload shape.

Usage:
    session = ClientSession(token="client_id:secret")
    async with EvoClient(session) as client:
        instances = await client.list_instances()
        ack = await client.destroy_instance("42")
        print(ack.message)

All failures are raised as ClientError subclasses (see evocli.core.exceptions).
"""

import base64
from types import TracebackType
from typing import Any

import httpx

from evocli.api.envelope import decode_envelope
from evocli.api.schemas import (
    Acknowledgement,
    CommandResult,
    CommandTask,
    DeployResult,
    EVOPermissions,
    Instance,
    InstanceList,
    InstanceState,
    OSGroup,
    OSGroupList,
    Plan,
    PlanList,
    PowerAction,
    RebuildResult,
    RenewalResult,
    SSHKey,
    SSHKeyList,
    UserInfo,
)
from evocli.api.session import ClientSession
from evocli.api.transport import RequestDescriptor, Transport


def encode_boot_script(script: str | None) -> str | None:
    """Base64-encode a boot script as the API expects; None stays absent."""
    if not script:
        return None
    return base64.b64encode(script.encode("utf-8")).decode("ascii")


class EvoClient:
    """
    Client for the EVO instance, plan, user and remote command endpoints.

    Holds no state besides the immutable session and the transport's
    connection pool, so repeated calls with the same inputs are independent.
    """

    def __init__(
        self,
        session: ClientSession,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.session = session
        self._transport = Transport(session, http_transport=http_transport)

    async def __aenter__(self) -> "EvoClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._transport.close()

    async def call(self, request: RequestDescriptor, shape: Any) -> Any:
        """
        Execute a request and decode its envelope into shape.

        Raises:
            NetworkError, HTTPStatusError, EnvelopeDecodeError,
            PayloadDecodeError, EnvelopeStatusError
        """
        body = await self._transport.execute(request)
        return decode_envelope(
            body,
            shape,
            enforce_status=self.session.enforce_envelope_status,
        )

    # -------------------------------------------------------------------------
    # Instances
    # -------------------------------------------------------------------------

    async def list_instances(self) -> list[Instance]:
        return await self.call(RequestDescriptor.get("/Evo/Instance"), InstanceList)

    async def deploy_instance(
        self,
        product_id: str,
        os_id: str,
        time: str,
        ssh_key: str | None = None,
        boot_script: str | None = None,
    ) -> DeployResult:
        """Deploy a new instance of a plan for `time` hours."""
        request = RequestDescriptor.post(
            "/Evo/Deploy",
            product_id=product_id,
            os_id=os_id,
            time=time,
            sshKey=ssh_key or None,
            bootScript=encode_boot_script(boot_script),
        )
        return await self.call(request, DeployResult)

    async def destroy_instance(self, id: str) -> Acknowledgement:
        return await self.call(RequestDescriptor.post("/Evo/Destroy", id=id), Acknowledgement)

    async def power_instance(self, id: str, action: PowerAction | str) -> Acknowledgement:
        """
        Run a power action: boot, shutdown, restart or poweroff.

        Raises:
            ValueError: Unknown action; nothing is sent.
        """
        request = RequestDescriptor.post("/Evo/Power", id=id, action=PowerAction(action).value)
        return await self.call(request, Acknowledgement)

    async def rebuild_instance(
        self,
        id: str,
        os: str,
        ssh_key: str | None = None,
        boot_script: str | None = None,
    ) -> RebuildResult:
        """Reinstall an instance with a new OS image."""
        request = RequestDescriptor.post(
            "/Evo/Rebuild",
            id=id,
            os=os,
            sshKey=ssh_key or None,
            bootScript=encode_boot_script(boot_script),
        )
        return await self.call(request, RebuildResult)

    async def renew_instance(self, id: str, time: str) -> RenewalResult:
        return await self.call(RequestDescriptor.post("/Evo/Renewal", id=id, time=time), RenewalResult)

    async def get_instance_state(self, id: str) -> InstanceState:
        return await self.call(RequestDescriptor.post("/Evo/State", id=id), InstanceState)

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    async def list_plans(self) -> list[Plan]:
        return await self.call(RequestDescriptor.get("/Evo/Plan"), PlanList)

    async def get_os_by_plan(self, plan_id: str) -> list[OSGroup]:
        return await self.call(RequestDescriptor.post("/Evo/getOSByPlan", plan_id=plan_id), OSGroupList)

    # -------------------------------------------------------------------------
    # User
    # -------------------------------------------------------------------------

    async def list_ssh_keys(self) -> list[SSHKey]:
        return await self.call(RequestDescriptor.get("/User/SSHKey"), SSHKeyList)

    async def get_evo_permissions(self) -> EVOPermissions:
        return await self.call(RequestDescriptor.get("/User/EVOPermissions"), EVOPermissions)

    async def get_user_info(self) -> UserInfo:
        return await self.call(RequestDescriptor.get("/User/Info"), UserInfo)

    # -------------------------------------------------------------------------
    # Remote commands
    # -------------------------------------------------------------------------

    async def execute_command(self, server_id: str, command: str) -> CommandTask:
        """Queue a shell command on an instance; the result is fetched later by uid."""
        request = RequestDescriptor.post("/Command/executeAsync", server_id=server_id, command=command)
        return await self.call(request, CommandTask)

    async def get_command_result(self, command_uid: str, output_base64: bool = False) -> CommandResult:
        """Fetch a queued command's output, optionally base64-encoded by the API."""
        request = RequestDescriptor.post(
            "/Command/getResult",
            command_uid=command_uid,
            output_base64="true" if output_base64 else None,
        )
        return await self.call(request, CommandResult)
