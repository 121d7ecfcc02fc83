"""
Container descriptor models.

The daemon describes a container with a large, versioned inspect document.
These models read the handful of fields needed to relaunch the container and
ignore everything else, so new daemon releases that add fields keep working.

Two layers are defined:

-   **Inspect models** (`InspectDocument`, `InspectConfig`, `InspectHostConfig`)
    mirror the daemon's JSON keys via aliases and normalise JSON ``null`` into
    empty collections.
-   **`ContainerDescriptor`**: the flattened, immutable snapshot consumed by
    command synthesis.
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _none_to_empty_dict(value: Any) -> Any:
    return {} if value is None else value


class PortBinding(BaseModel):
    """A single host-side binding of a container port."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    host_ip: str = Field(default="", alias="HostIp")
    host_port: str = Field(default="", alias="HostPort")

    @field_validator("host_ip", "host_port", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class RestartPolicy(BaseModel):
    """Restart policy as reported by the daemon. An empty name means no policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(default="", alias="Name")
    maximum_retry_count: int = Field(default=0, alias="MaximumRetryCount")

    @field_validator("name", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("maximum_retry_count", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class InspectConfig(BaseModel):
    """The ``Config`` section of an inspect document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image: str = Field(alias="Image")
    cmd: Tuple[str, ...] = Field(default=(), alias="Cmd")
    env: Tuple[str, ...] = Field(default=(), alias="Env")

    @field_validator("cmd", "env", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return _none_to_empty_list(value)


class InspectHostConfig(BaseModel):
    """The ``HostConfig`` section of an inspect document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    binds: Tuple[str, ...] = Field(default=(), alias="Binds")
    port_bindings: Dict[str, Tuple[PortBinding, ...]] = Field(
        default_factory=dict, alias="PortBindings"
    )
    restart_policy: RestartPolicy = Field(
        default_factory=RestartPolicy, alias="RestartPolicy"
    )
    network_mode: str = Field(default="", alias="NetworkMode")
    privileged: bool = Field(default=False, alias="Privileged")
    publish_all_ports: bool = Field(default=False, alias="PublishAllPorts")

    @field_validator("binds", mode="before")
    @classmethod
    def _null_binds(cls, value: Any) -> Any:
        return _none_to_empty_list(value)

    @field_validator("port_bindings", mode="before")
    @classmethod
    def _null_port_bindings(cls, value: Any) -> Any:
        value = _none_to_empty_dict(value)
        if isinstance(value, Mapping):
            # A container port with no host binding is reported as ``null``.
            return {port: _none_to_empty_list(b) for port, b in value.items()}
        return value

    @field_validator("restart_policy", mode="before")
    @classmethod
    def _null_restart_policy(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)

    @field_validator("network_mode", mode="before")
    @classmethod
    def _null_network_mode(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("privileged", "publish_all_ports", mode="before")
    @classmethod
    def _null_flags(cls, value: Any) -> Any:
        return False if value is None else value


class InspectDocument(BaseModel):
    """One element of the array returned by ``docker container inspect``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    container_config: InspectConfig = Field(alias="Config")
    host_config: InspectHostConfig = Field(
        default_factory=InspectHostConfig, alias="HostConfig"
    )

    @field_validator("host_config", mode="before")
    @classmethod
    def _null_host_config(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)


class ContainerDescriptor(BaseModel):
    """
    Immutable, point-in-time snapshot of a container's launch configuration.

    Attributes
    ----------
    name : str
        Container name as reported by the daemon, possibly with a leading ``/``.
    image : str
        Image reference (``repository[:tag]``).
    command : Tuple[str, ...]
        Command/arguments override. Empty means the image default.
    environment : Tuple[str, ...]
        ``KEY=VALUE`` entries in daemon order.
    volume_binds : Tuple[str, ...]
        Raw ``source:target[:mode]`` bind specifications.
    port_bindings : Mapping[str, Tuple[PortBinding, ...]]
        Container port spec (``"80/tcp"``) to its host bindings.
    restart_policy : RestartPolicy
        Restart policy; an empty name means none was set.
    network_mode : str
        Network mode; ``""`` and ``"default"`` both mean the daemon default.
    privileged : bool
        Whether the container runs privileged.
    publish_all_ports : bool
        Whether all exposed ports are published to random host ports.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    image: str
    command: Tuple[str, ...] = ()
    environment: Tuple[str, ...] = ()
    volume_binds: Tuple[str, ...] = ()
    port_bindings: Mapping[str, Tuple[PortBinding, ...]] = Field(
        default_factory=dict, validate_default=True
    )
    restart_policy: RestartPolicy = Field(default_factory=RestartPolicy)
    network_mode: str = ""
    privileged: bool = False
    publish_all_ports: bool = False

    @field_validator("port_bindings", mode="after")
    @classmethod
    def _read_only_port_bindings(
        cls, value: Mapping[str, Tuple[PortBinding, ...]]
    ) -> Mapping[str, Tuple[PortBinding, ...]]:
        # frozen=True only guards attribute assignment, not the map's items.
        return MappingProxyType(dict(value))

    @property
    def normalized_name(self) -> str:
        """The container name without the daemon's leading path separator."""
        return self.name[1:] if self.name.startswith("/") else self.name

    @classmethod
    def from_inspect(cls, payload: Mapping[str, Any]) -> "ContainerDescriptor":
        """
        Build a descriptor from a single inspect document.

        Parameters
        ----------
        payload : Mapping[str, Any]
            One decoded element of the daemon's inspect array.

        Returns
        -------
        ContainerDescriptor
            The flattened snapshot.

        Raises
        ------
        pydantic.ValidationError
            If a required field (``Name``, ``Config.Image``) is missing or any
            used field has the wrong type.
        """
        doc = InspectDocument.model_validate(payload)
        host = doc.host_config
        return cls(
            name=doc.name,
            image=doc.container_config.image,
            command=doc.container_config.cmd,
            environment=doc.container_config.env,
            volume_binds=host.binds,
            port_bindings=host.port_bindings,
            restart_policy=host.restart_policy,
            network_mode=host.network_mode,
            privileged=host.privileged,
            publish_all_ports=host.publish_all_ports,
        )
