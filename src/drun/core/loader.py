"""
Descriptor loading.

Asks the daemon backend for a container's inspect document and decodes the
first match into a `ContainerDescriptor`. The only side effect is the
read-only daemon query.
"""

import logging
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from drun.core.errors import DecodeFailed, NotFound, QueryFailed
from drun.integrations.containers.backends import ContainerBackend
from drun.models.descriptor import ContainerDescriptor

logger = logging.getLogger(__name__)


def decode_descriptor(payload: Any, name: str) -> ContainerDescriptor:
    """
    Decode a daemon inspect response into a descriptor.

    Parameters
    ----------
    payload : Any
        Decoded inspect response; expected to be an array of documents.
    name : str
        The name that was queried, used in error messages.

    Returns
    -------
    ContainerDescriptor
        Descriptor for the first document in the array. Any further matches
        are ignored.

    Raises
    ------
    NotFound
        If the array is empty.
    DecodeFailed
        If the payload is not an array of objects or the first document lacks
        required fields.
    """
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise DecodeFailed(
            "Failed to parse container info",
            f"expected an array, got {type(payload).__name__}",
        )
    if len(payload) == 0:
        raise NotFound(f"Container '{name}' not found")
    if len(payload) > 1:
        logger.debug(f"Inspect of '{name}' returned {len(payload)} matches; using the first")

    first = payload[0]
    if not isinstance(first, Mapping):
        raise DecodeFailed(
            "Failed to parse container info",
            f"expected an object, got {type(first).__name__}",
        )
    try:
        return ContainerDescriptor.from_inspect(first)
    except ValidationError as e:
        raise DecodeFailed("Failed to parse container info", str(e)) from e


def load_descriptor(name: str, backend: ContainerBackend) -> ContainerDescriptor:
    """
    Load the current configuration of the container called ``name``.

    Raises `NotFound`, `QueryFailed` or `DecodeFailed`.
    """
    if not name:
        raise QueryFailed("Failed to inspect container", "container name is empty")
    logger.debug(f"Inspecting container '{name}'")
    payload = backend.inspect(name)
    return decode_descriptor(payload, name)
