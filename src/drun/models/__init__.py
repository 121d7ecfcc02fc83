"""
The `models` module defines the data structures drun reads from the container
daemon: the raw inspect document and the immutable `ContainerDescriptor`.
"""

from drun.models.descriptor import (
    ContainerDescriptor,
    InspectConfig,
    InspectDocument,
    InspectHostConfig,
    PortBinding,
    RestartPolicy,
)

__all__ = [
    "ContainerDescriptor",
    "InspectConfig",
    "InspectDocument",
    "InspectHostConfig",
    "PortBinding",
    "RestartPolicy",
]
