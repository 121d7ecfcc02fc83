"""
drun: recreate a running container from its live configuration.

This package provides the public API for drun: loading a container's
descriptor from the daemon, synthesizing an equivalent launch command, and
running the full stop/remove/pull/run redeploy.
"""

# Models
from drun.models.descriptor import ContainerDescriptor, PortBinding, RestartPolicy

# Core
from drun.core.errors import (
    DecodeFailed,
    DrunError,
    ExecutionFailed,
    LifecycleFailed,
    NotFound,
    PullFailed,
    QueryFailed,
)
from drun.core.loader import load_descriptor
from drun.core.pipeline import RedeployResult, redeploy
from drun.core.synthesis import format_command, synthesize

# Backends
from drun.integrations.containers.backends import (
    ContainerBackend,
    DockerCLIBackend,
    DockerSDKBackend,
)

__all__ = [
    # Models
    "ContainerDescriptor",
    "PortBinding",
    "RestartPolicy",
    # Errors
    "DrunError",
    "NotFound",
    "QueryFailed",
    "DecodeFailed",
    "LifecycleFailed",
    "PullFailed",
    "ExecutionFailed",
    # Functional helpers
    "load_descriptor",
    "synthesize",
    "format_command",
    "redeploy",
    "RedeployResult",
    # Backends
    "ContainerBackend",
    "DockerCLIBackend",
    "DockerSDKBackend",
]
