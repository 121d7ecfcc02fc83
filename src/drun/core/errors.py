"""
Error taxonomy for a redeploy.

Every failure is terminal for the invocation; nothing is retried. Each error
carries the message reported by the daemon (or the local process) so the
operator sees the underlying cause.
"""

from typing import Optional


class DrunError(Exception):
    """Base class for all drun failures."""

    #: Pipeline stage the error belongs to, used in operator-facing messages.
    stage = "redeploy"

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        self.message = message
        self.detail = (detail or "").strip() or None
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class NotFound(DrunError):
    """The daemon reports no container with the requested name."""

    stage = "inspect"


class QueryFailed(DrunError):
    """The inspect call itself failed (daemon unreachable, permission denied, bad name)."""

    stage = "inspect"


class DecodeFailed(DrunError):
    """The inspect response could not be decoded into a descriptor."""

    stage = "inspect"


class LifecycleFailed(DrunError):
    """Stopping or removing the existing container failed."""

    stage = "stop/remove"


class PullFailed(DrunError):
    """Pulling the image failed."""

    stage = "pull"


class ExecutionFailed(DrunError):
    """Launching the replacement container failed."""

    stage = "run"
