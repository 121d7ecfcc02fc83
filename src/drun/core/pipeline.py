"""
The redeploy pipeline.

Runs the strictly sequential flow::

    load -> stop -> remove -> pull -> synthesize -> confirm -> execute

Every daemon call blocks and every failure is terminal: the error propagates
to the caller and later steps never run. There is no compensation. If the
old container has been stopped and removed and the pull or the final run
fails, the old container stays gone; the command shown to the operator (or a
prior ``dry_run``) is the way to recreate it by hand.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from drun.core.loader import load_descriptor
from drun.core.sink import Event, OutputSink, Severity
from drun.core.synthesis import format_command, synthesize
from drun.integrations.containers.backends import ContainerBackend
from drun.models.descriptor import ContainerDescriptor

logger = logging.getLogger(__name__)

CONFIRM_PROMPT = "Do you want to execute this command? (y/N): "

Status = Literal["dry_run", "declined", "executed"]


@dataclass
class RedeployResult:
    """Outcome of a redeploy invocation."""

    descriptor: ContainerDescriptor
    tokens: List[str]
    command: str
    status: Status

    @property
    def executed(self) -> bool:
        return self.status == "executed"


def is_affirmative(answer: Optional[str]) -> bool:
    """Only ``y`` or ``yes`` (any case, surrounding whitespace ignored) confirm."""
    if answer is None:
        return False
    return answer.strip().lower() in ("y", "yes")


def redeploy(
    name: str,
    backend: ContainerBackend,
    sink: OutputSink,
    confirm: Callable[[str], bool],
    dry_run: bool = False,
    program: str = "docker",
) -> RedeployResult:
    """
    Recreate the container ``name`` from its current configuration and the
    latest version of its image.

    Parameters
    ----------
    name : str
        Name or ID of the running container.
    backend : ContainerBackend
        Daemon backend used for every external call.
    sink : OutputSink
        Receives progress and outcome events.
    confirm : Callable[[str], bool]
        Called with a prompt once the command is ready; execution only
        proceeds when it returns True.
    dry_run : bool, default False
        Load and synthesize only. Nothing is stopped, removed, pulled or run.
    program : str, default "docker"
        Program name shown in front of the synthesized tokens.

    Returns
    -------
    RedeployResult
        The descriptor, the synthesized tokens and how the run ended.

    Raises
    ------
    DrunError
        Any failure from the loader or the backend, unchanged.
    """
    sink.emit(Event(Severity.INFO, f"Processing container: {name}"))
    descriptor = load_descriptor(name, backend)
    sink.emit(Event(Severity.INFO, f"Container image: {descriptor.image}"))

    if dry_run:
        tokens = synthesize(descriptor)
        command = format_command(tokens, program)
        sink.emit(
            Event(
                Severity.INFO,
                "Dry run: no container was stopped, removed, pulled or started",
                command=command,
            )
        )
        return RedeployResult(descriptor, tokens, command, "dry_run")

    sink.emit(Event(Severity.INFO, f"Stopping container {name}..."))
    backend.stop(name)
    sink.emit(Event(Severity.INFO, f"Removing container {name}..."))
    backend.remove(name)
    sink.emit(Event(Severity.INFO, f"Pulling latest image {descriptor.image}..."))
    backend.pull_image(descriptor.image)

    tokens = synthesize(descriptor)
    command = format_command(tokens, program)
    logger.debug(f"Synthesized tokens for '{name}': {tokens}")
    sink.emit(
        Event(Severity.INFO, f"Launch command for {descriptor.normalized_name} ready", command=command)
    )

    if not confirm(CONFIRM_PROMPT):
        sink.emit(Event(Severity.WARNING, "Operation cancelled by user."))
        return RedeployResult(descriptor, tokens, command, "declined")

    backend.run(tokens)
    sink.emit(
        Event(
            Severity.SUCCESS,
            f"Container {name} has been successfully restarted with latest image",
        )
    )
    return RedeployResult(descriptor, tokens, command, "executed")
