"""
drun Daemon Backends Module

This module defines the boundary between drun and the container daemon. A
redeploy needs exactly five daemon calls: inspect, stop, remove, pull and run.
`ContainerBackend` declares them; the concrete backends translate daemon and
process failures into drun's error taxonomy.

Key features include:
-   **Abstract Interface (`ContainerBackend`)**: The five-call contract.
-   **Docker CLI (`DockerCLIBackend`)**: Drives the ``docker`` binary through
    ``subprocess``. Pull and run output go straight to the operator's terminal.
-   **Docker SDK (`DockerSDKBackend`)**: Talks to the daemon API through the
    ``docker`` Python package, mapping the synthesized launch tokens back onto
    ``containers.run`` keyword arguments.
"""

import abc
import json
import logging
import subprocess
import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO

import docker

from drun.core.errors import (
    DecodeFailed,
    ExecutionFailed,
    LifecycleFailed,
    NotFound,
    PullFailed,
    QueryFailed,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("no such container", "no such object")

# Network modes that select a namespace rather than a user-defined network.
_NAMESPACE_NETWORK_MODES = ("host", "none")


class ContainerBackend(abc.ABC):
    @abc.abstractmethod
    def inspect(self, name: str) -> Any:
        """
        Query the daemon for a container's configuration.

        Parameters
        ----------
        name : str
            Container name or ID.

        Returns
        -------
        Any
            The decoded inspect response: an array of inspect documents.

        Raises
        ------
        NotFound
            If the daemon knows no such container.
        QueryFailed
            If the daemon could not be queried.
        DecodeFailed
            If the response is not valid JSON.
        """

    @abc.abstractmethod
    def stop(self, name: str) -> None:
        """Stop the container. Raises `LifecycleFailed` on failure."""

    @abc.abstractmethod
    def remove(self, name: str) -> None:
        """Remove the container. Raises `LifecycleFailed` on failure."""

    @abc.abstractmethod
    def pull_image(self, image: str) -> None:
        """
        Pull the latest version of an image, streaming progress to the operator.

        Raises `PullFailed` on failure.
        """

    @abc.abstractmethod
    def run(self, tokens: Sequence[str]) -> None:
        """
        Launch a container from synthesized tokens (``["run", "-d", ...]``).

        Raises `ExecutionFailed` on failure.
        """


def _is_not_found(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _NOT_FOUND_MARKERS)


class DockerCLIBackend(ContainerBackend):
    """
    A `ContainerBackend` that shells out to the ``docker`` command line client.

    Arguments are always passed as a list; no shell is involved, so values
    with spaces or quotes reach the daemon verbatim.

    Attributes
    ----------
    docker_bin : str
        Name or path of the docker executable.
    """

    def __init__(self, docker_bin: str = "docker") -> None:
        self.docker_bin = docker_bin

    def _argv(self, *args: str) -> List[str]:
        return [self.docker_bin, *args]

    def _call(
        self,
        argv: List[str],
        error_cls: type,
        message: str,
        capture: bool = True,
        not_found: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        """
        Run ``argv`` and raise ``error_cls(message, ...)`` on failure.

        When ``not_found`` is given, a "no such container" error on stderr
        raises `NotFound` with that message instead.
        """
        logger.debug("Running %s", argv)
        try:
            if capture:
                res = subprocess.run(argv, capture_output=True, text=True, check=False)
            else:
                res = subprocess.run(argv, check=False)
        except OSError as e:
            raise error_cls(message, f"could not execute {self.docker_bin}: {e}") from e
        if res.returncode != 0:
            detail = (res.stderr or "") if capture else ""
            if not_found is not None and _is_not_found(detail):
                raise NotFound(not_found, detail)
            if not detail.strip():
                detail = f"{argv[0]} exited with status {res.returncode}"
            raise error_cls(message, detail)
        return res

    def inspect(self, name: str) -> Any:
        res = self._call(
            self._argv("container", "inspect", name),
            QueryFailed,
            "Failed to inspect container",
            not_found=f"Container '{name}' not found",
        )
        try:
            return json.loads(res.stdout)
        except json.JSONDecodeError as e:
            raise DecodeFailed("Failed to parse container info", str(e)) from e

    def stop(self, name: str) -> None:
        self._call(
            self._argv("stop", name), LifecycleFailed, f"Failed to stop container '{name}'"
        )

    def remove(self, name: str) -> None:
        self._call(
            self._argv("rm", name), LifecycleFailed, f"Failed to remove container '{name}'"
        )

    def pull_image(self, image: str) -> None:
        self._call(
            self._argv("pull", image),
            PullFailed,
            f"Failed to pull image '{image}'",
            capture=False,
        )

    def run(self, tokens: Sequence[str]) -> None:
        self._call(
            self._argv(*tokens),
            ExecutionFailed,
            "Failed to run container",
            capture=False,
        )


def _run_kwargs(tokens: Sequence[str]) -> Dict[str, Any]:
    """
    Translate synthesized ``docker run`` tokens into ``containers.run`` kwargs.

    Only the flags produced by `drun.core.synthesis.synthesize` are understood;
    the first token that is not one of them is the image, the rest is the
    command.
    """
    args = list(tokens)
    if args[:2] != ["run", "-d"]:
        raise ValueError(f"Not a detached run command: {args[:2]}")
    args = args[2:]

    kwargs: Dict[str, Any] = {"detach": True}
    volumes: List[str] = []
    environment: List[str] = []
    ports: Dict[str, Any] = {}

    i = 0
    while i < len(args):
        flag = args[i]
        if flag == "--privileged":
            kwargs["privileged"] = True
            i += 1
            continue
        if flag == "-P":
            kwargs["publish_all_ports"] = True
            i += 1
            continue
        if flag not in ("--name", "--restart", "-v", "-p", "-e", "--network"):
            break
        if i + 1 >= len(args):
            raise ValueError(f"Flag {flag} is missing its value")
        value = args[i + 1]
        i += 2

        if flag == "--name":
            kwargs["name"] = value
        elif flag == "--restart":
            kwargs["restart_policy"] = {"Name": value}
        elif flag == "-v":
            volumes.append(value)
        elif flag == "-e":
            environment.append(value)
        elif flag == "-p":
            host_port, container_port = value.split(":", 1)
            existing = ports.get(container_port)
            if existing is None:
                ports[container_port] = host_port
            elif isinstance(existing, list):
                existing.append(host_port)
            else:
                ports[container_port] = [existing, host_port]
        elif flag == "--network":
            if value in _NAMESPACE_NETWORK_MODES or value.startswith("container:"):
                kwargs["network_mode"] = value
            else:
                kwargs["network"] = value

    if i >= len(args):
        raise ValueError("Run command has no image reference")

    kwargs["image"] = args[i]
    command = args[i + 1 :]
    if command:
        kwargs["command"] = command
    if volumes:
        kwargs["volumes"] = volumes
    if environment:
        kwargs["environment"] = environment
    if ports:
        kwargs["ports"] = ports
    return kwargs


class DockerSDKBackend(ContainerBackend):
    """
    A `ContainerBackend` that uses the Docker SDK for Python.

    Attributes
    ----------
    client : docker.client.DockerClient
        Client used to talk to the daemon. Created lazily with
        `docker.from_env()` unless one is injected.
    stream : TextIO
        Where image pull progress lines are written.
    """

    def __init__(self, client: Optional[Any] = None, stream: Optional[TextIO] = None) -> None:
        self._client = client
        self.stream = stream or sys.stdout

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except docker.errors.DockerException as e:
                raise QueryFailed("Could not connect to the Docker daemon", str(e)) from e
        return self._client

    def inspect(self, name: str) -> Any:
        client = self.client
        try:
            return [client.api.inspect_container(name)]
        except docker.errors.NotFound as e:
            raise NotFound(f"Container '{name}' not found", str(e)) from e
        except docker.errors.DockerException as e:
            raise QueryFailed("Failed to inspect container", str(e)) from e

    def stop(self, name: str) -> None:
        try:
            self.client.api.stop(name)
        except docker.errors.DockerException as e:
            raise LifecycleFailed(f"Failed to stop container '{name}'", str(e)) from e

    def remove(self, name: str) -> None:
        try:
            self.client.api.remove_container(name)
        except docker.errors.DockerException as e:
            raise LifecycleFailed(f"Failed to remove container '{name}'", str(e)) from e

    def pull_image(self, image: str) -> None:
        try:
            for chunk in self.client.api.pull(image, stream=True, decode=True):
                if "error" in chunk:
                    raise PullFailed(f"Failed to pull image '{image}'", chunk["error"])
                line = " ".join(
                    str(chunk[key]) for key in ("id", "status", "progress") if chunk.get(key)
                )
                if line:
                    self.stream.write(line + "\n")
        except docker.errors.DockerException as e:
            raise PullFailed(f"Failed to pull image '{image}'", str(e)) from e
        self.stream.flush()

    def run(self, tokens: Sequence[str]) -> None:
        try:
            kwargs = _run_kwargs(tokens)
        except ValueError as e:
            raise ExecutionFailed("Failed to run container", str(e)) from e
        image = kwargs.pop("image")
        try:
            container = self.client.containers.run(image, **kwargs)
        except docker.errors.DockerException as e:
            raise ExecutionFailed("Failed to run container", str(e)) from e
        logger.info(f"Started container {getattr(container, 'short_id', container)}")


def make_backend(kind: str = "cli", docker_bin: str = "docker") -> ContainerBackend:
    """Return the backend registered under ``kind`` (``"cli"`` or ``"sdk"``)."""
    if kind == "cli":
        return DockerCLIBackend(docker_bin=docker_bin)
    if kind == "sdk":
        return DockerSDKBackend()
    raise ValueError(f"Unknown backend '{kind}'. Expected 'cli' or 'sdk'.")
