"""
Command synthesis.

Turns a `ContainerDescriptor` into the ordered argument list of an equivalent
``docker run`` invocation. Synthesis is a pure function of the descriptor: no
I/O, no failure path, and identical input always yields identical tokens.
"""

import shlex
from typing import Iterable, List, Sequence

from drun.models.descriptor import ContainerDescriptor

# Injected by the daemon or the base image at creation time.
DENIED_ENV_KEYS = ("PATH", "HOSTNAME", "HOME", "TERM")

DEFAULT_NETWORK_MODE = "default"

RUN_DETACHED = ("run", "-d")


def is_denied_env(entry: str, denied_keys: Iterable[str] = DENIED_ENV_KEYS) -> bool:
    """Return True if ``entry`` (``KEY=VALUE``) sets one of ``denied_keys``."""
    return any(entry.startswith(f"{key}=") for key in denied_keys)


def _restart_args(descriptor: ContainerDescriptor) -> List[str]:
    policy = descriptor.restart_policy.name
    return ["--restart", policy] if policy else []


def _volume_args(descriptor: ContainerDescriptor) -> List[str]:
    args: List[str] = []
    for bind in descriptor.volume_binds:
        args.extend(["-v", bind])
    return args


def _port_args(descriptor: ContainerDescriptor) -> List[str]:
    """
    Publish flags for every binding with a concrete host port.

    Container ports are visited in lexical order so the output does not depend
    on the order the daemon happened to serialise them in. Bindings with an
    empty host port were dynamically assigned and cannot be replayed.
    """
    args: List[str] = []
    for container_port in sorted(descriptor.port_bindings):
        for binding in descriptor.port_bindings[container_port]:
            if binding.host_port:
                args.extend(["-p", f"{binding.host_port}:{container_port}"])
    return args


def _env_args(descriptor: ContainerDescriptor) -> List[str]:
    args: List[str] = []
    for entry in descriptor.environment:
        if not is_denied_env(entry):
            args.extend(["-e", entry])
    return args


def _network_args(descriptor: ContainerDescriptor) -> List[str]:
    mode = descriptor.network_mode
    if mode and mode != DEFAULT_NETWORK_MODE:
        return ["--network", mode]
    return []


def synthesize(descriptor: ContainerDescriptor) -> List[str]:
    """
    Build the launch tokens for a container equivalent to ``descriptor``.

    The returned list starts with the ``run`` subcommand; the program name
    (``docker``) is supplied by whoever executes or displays the command.

    Token order:

    1. ``run -d``
    2. ``--name`` with the normalised name
    3. ``--restart`` (only when a policy name is set; retry count is not emitted)
    4. ``-v`` per bind, in descriptor order
    5. ``-p hostPort:containerPort/proto`` per bound host port
    6. ``-e`` per environment entry, minus ``PATH``, ``HOSTNAME``, ``HOME``, ``TERM``
    7. ``--privileged``
    8. ``-P`` (publish all ports)
    9. ``--network`` unless empty or ``default``
    10. the image reference
    11. the command override, verbatim

    Parameters
    ----------
    descriptor : ContainerDescriptor
        Snapshot of the container to reproduce.

    Returns
    -------
    List[str]
        A fresh list of tokens; callers may mutate it freely.
    """
    tokens: List[str] = list(RUN_DETACHED)
    tokens.extend(["--name", descriptor.normalized_name])
    tokens.extend(_restart_args(descriptor))
    tokens.extend(_volume_args(descriptor))
    tokens.extend(_port_args(descriptor))
    tokens.extend(_env_args(descriptor))
    if descriptor.privileged:
        tokens.append("--privileged")
    if descriptor.publish_all_ports:
        tokens.append("-P")
    tokens.extend(_network_args(descriptor))
    tokens.append(descriptor.image)
    tokens.extend(descriptor.command)
    return tokens


def format_command(tokens: Sequence[str], program: str = "docker") -> str:
    """Render ``program`` plus ``tokens`` as a single shell-quoted line."""
    return shlex.join([program, *tokens])
