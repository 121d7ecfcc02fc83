from __future__ import annotations

import os
from dataclasses import dataclass

BACKENDS = ("cli", "sdk")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "")
    if raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name, "")
    if raw.strip() == "":
        return default
    return raw.strip()


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = _env_str(name, default).lower()
    return value if value in choices else default


@dataclass(frozen=True)
class DrunSettings:
    docker_bin: str = "docker"
    backend: str = "cli"
    dry_run: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "DrunSettings":
        return cls(
            docker_bin=_env_str("DRUN_DOCKER_BIN", "docker"),
            backend=_env_choice("DRUN_BACKEND", "cli", BACKENDS),
            dry_run=_env_bool("DRUN_DRY_RUN", False),
            log_level=_env_str("DRUN_LOG_LEVEL", "WARNING").upper(),
        )
