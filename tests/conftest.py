import copy
from typing import Any, Dict, List, Optional, Sequence

import pytest

from drun.core.sink import Event
from drun.integrations.containers.backends import ContainerBackend


# --- Sample Data ---


BASE_INSPECT: Dict[str, Any] = {
    "Id": "4f1c2d3e",
    "Name": "/app",
    "State": {"Status": "running", "Running": True},
    "Config": {
        "Hostname": "4f1c2d3e",
        "Image": "app:latest",
        "Cmd": ["serve"],
        "Env": ["PATH=/usr/bin", "KEY=1"],
        "Labels": {"com.example.team": "web"},
    },
    "HostConfig": {
        "Binds": ["/data:/data"],
        "PortBindings": {"80/tcp": [{"HostIp": "", "HostPort": "8080"}]},
        "RestartPolicy": {"Name": "always", "MaximumRetryCount": 0},
        "NetworkMode": "default",
        "Privileged": False,
        "PublishAllPorts": False,
        "LogConfig": {"Type": "json-file", "Config": {}},
    },
    "NetworkSettings": {"Networks": {"bridge": {"NetworkID": "abc"}}},
}


@pytest.fixture
def inspect_document():
    """
    Factory fixture returning a deep copy of a realistic inspect document,
    with ``Config`` / ``HostConfig`` keys overridden by keyword arguments.
    """

    def _make(name: Optional[str] = None, config=None, host_config=None):
        doc = copy.deepcopy(BASE_INSPECT)
        if name is not None:
            doc["Name"] = name
        doc["Config"].update(config or {})
        doc["HostConfig"].update(host_config or {})
        return doc

    return _make


# --- Test Doubles ---


class RecordingSink:
    """Collects emitted events in order."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.events]


class FakeBackend(ContainerBackend):
    """
    In-memory backend recording every daemon call.

    ``failures`` maps a call name ("inspect", "stop", ...) to the exception
    that call should raise.
    """

    def __init__(self, payload: Any = None, failures: Optional[Dict[str, Exception]] = None):
        self.payload = payload
        self.failures = failures or {}
        self.calls: List[tuple] = []

    def _record(self, call: str, arg: Any) -> None:
        self.calls.append((call, arg))
        if call in self.failures:
            raise self.failures[call]

    def inspect(self, name: str) -> Any:
        self._record("inspect", name)
        return self.payload

    def stop(self, name: str) -> None:
        self._record("stop", name)

    def remove(self, name: str) -> None:
        self._record("remove", name)

    def pull_image(self, image: str) -> None:
        self._record("pull_image", image)

    def run(self, tokens: Sequence[str]) -> None:
        self._record("run", list(tokens))

    @property
    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_backend(inspect_document) -> FakeBackend:
    """A backend whose inspect returns the sample container."""
    return FakeBackend(payload=[inspect_document()])


@pytest.fixture
def backend_factory():
    """Build a `FakeBackend` with a custom payload and/or failures."""
    return FakeBackend
