"""
Payload Schemas.

Typed shapes for the "data" member of API response envelopes. Decoded
payloads are frozen and consumed once by a renderer.

Unknown fields are ignored. Numbers sent where a string is expected are
coerced to str. Identity fields are required; everything else defaults to
its zero value, so a sparse record still decodes.
"""

from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    model_validator,
)


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


class PayloadModel(BaseModel):
    """Base for all payload shapes."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        populate_by_name=True,
    )


class PowerAction(str, Enum):
    BOOT = "boot"
    SHUTDOWN = "shutdown"
    RESTART = "restart"
    POWEROFF = "poweroff"


# =============================================================================
# Message-only results
# =============================================================================


class Acknowledgement(PayloadModel):
    """
    Result of an operation whose only output is the envelope message.

    Built from the decoder's validation context rather than from "data",
    which these endpoints usually leave null.
    """

    message: str = ""
    status: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_envelope(cls, data: Any, info: ValidationInfo) -> Any:
        context = info.context
        if not context or "message" not in context:
            return data
        return {"message": context["message"], "status": context.get("status")}


# =============================================================================
# Instances
# =============================================================================


class Instance(PayloadModel):
    id: int
    uid: str = ""
    ipv4: str = ""
    ipv6: str = ""
    hostname: str = ""
    cpu: int = 0
    cpu_name: str = ""
    memory: int = 0
    disk: str = ""
    disk_type: str = ""
    user: str = ""
    password: str = ""
    status: str = ""
    creation_at: str = ""
    expiration_at: str = ""
    plan: str = ""
    region: str = ""
    os: str = ""
    show_speed: str = ""


class DeployResult(PayloadModel):
    id: str
    password: str = ""
    ipv4: str = ""
    ipv6: str = ""
    hostname: str = ""


class RebuildResult(PayloadModel):
    ipv4: str = ""
    ipv6: str = ""
    hostname: str = ""
    password: str = ""


class RenewalResult(PayloadModel):
    expiration_at: str = ""
    added_hours: str = ""
    total_service_hours: int = 0


class MemoryUsage(PayloadModel):
    """Memory figures in kB, sent as strings."""

    memtotal: str = "0"
    memfree: str = "0"
    memavailable: str = "0"


class TrafficUsage(PayloadModel):
    """Traffic counters in bytes."""

    inbound: int = Field(default=0, alias="in")
    outbound: int = Field(default=0, alias="out")
    total: int = 0


class StateDetail(PayloadModel):
    memory: MemoryUsage = Field(default_factory=MemoryUsage)
    cpu: int = 0
    state: str = ""
    traffic: TrafficUsage = Field(default_factory=TrafficUsage)


class SystemImage(PayloadModel):
    name: str = ""
    group_name: str = ""


class InstanceState(PayloadModel):
    name: str = ""
    status: str = ""
    state: StateDetail = Field(default_factory=StateDetail)
    system: SystemImage = Field(default_factory=SystemImage)


# =============================================================================
# Catalog
# =============================================================================


class OperatingSystem(PayloadModel):
    id: int
    name: str = ""


class OSGroup(PayloadModel):
    group_name: str = ""
    os_list: Annotated[list[OperatingSystem], BeforeValidator(_none_as_empty)] = []


class Plan(PayloadModel):
    id: int
    name: str = ""
    stock: int = 0
    cpu: int = 0
    memory: int = 0
    disk: int = 0
    network_speed: str = ""
    os: Annotated[list[OSGroup], BeforeValidator(_none_as_empty)] = []


# =============================================================================
# Account
# =============================================================================


class SSHKey(PayloadModel):
    id: int
    name: str = ""
    publickey: str = ""
    created_at: str = ""


class EVOPermissions(PayloadModel):
    user_id: int
    plan: str = ""
    max_time: int = 0
    allow_packages: str = ""


class UserInfo(PayloadModel):
    id: int
    email: str = ""
    username: str = ""
    credit: int = 0


# =============================================================================
# Remote commands
# =============================================================================


class CommandPayload(PayloadModel):
    """
    Base for the command endpoints, whose payload layout is not fixed.

    Unknown members are kept in `model_extra` so they can be shown as-is,
    and a null "data" decodes to an empty record.
    """

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _null_as_empty(cls, data: Any) -> Any:
        return {} if data is None else data

    def extra_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class CommandTask(CommandPayload):
    """A command queued on an instance; poll its result by uid."""

    command_uid: str = ""


class CommandResult(CommandPayload):
    output: str = ""


# =============================================================================
# List shapes (a null "data" means an empty list)
# =============================================================================

InstanceList = Annotated[list[Instance], BeforeValidator(_none_as_empty)]
PlanList = Annotated[list[Plan], BeforeValidator(_none_as_empty)]
OSGroupList = Annotated[list[OSGroup], BeforeValidator(_none_as_empty)]
SSHKeyList = Annotated[list[SSHKey], BeforeValidator(_none_as_empty)]
