"""
drun Command Line Interface (CLI)

Recreates a running container from its current configuration and the latest
version of its image: inspect, stop, remove, pull, show the equivalent
``docker run`` command, and run it once the operator confirms.
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from drun.core.errors import DrunError
from drun.core.pipeline import is_affirmative, redeploy
from drun.core.settings import BACKENDS, DrunSettings
from drun.core.sink import ConsoleSink, Event, Severity
from drun.integrations.containers.backends import make_backend

app = typer.Typer(rich_markup_mode="markdown", add_completion=False)
console = Console(highlight=False)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def confirm_execution(prompt: str) -> bool:
    """Read one line from the operator. Read failures count as a decline."""
    try:
        answer = console.input(f"[yellow]{prompt}[/yellow]")
    except (EOFError, OSError):
        return False
    return is_affirmative(answer)


@app.command()
def drun(
    container: str = typer.Argument(..., help="Name or ID of the container to recreate."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Only print the reconstructed command; nothing is stopped, removed, pulled or run.",
    ),
    backend: Optional[str] = typer.Option(
        None, "--backend", help="Daemon backend: 'cli' (docker binary) or 'sdk' (Docker API)."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    """
    Recreates CONTAINER with the latest version of its image.

    **Warning:** the existing container is stopped and removed *before* the
    image is pulled and the new command is confirmed. If a later step fails
    or you decline, the old container is not restored. Use `--dry-run` first
    to review the command.
    """
    settings = DrunSettings.from_env()
    _configure_logging("DEBUG" if verbose else settings.log_level)

    backend_kind = (backend or settings.backend).lower()
    if backend_kind not in BACKENDS:
        console.print(f"[red]Unknown backend '{backend_kind}'. Choose one of: {', '.join(BACKENDS)}[/red]")
        raise typer.Exit(2)

    # DRUN_DOCKER_BIN is only executed by the CLI backend.
    program = settings.docker_bin if backend_kind == "cli" else "docker"
    sink = ConsoleSink(console)
    try:
        redeploy(
            container,
            make_backend(backend_kind, docker_bin=settings.docker_bin),
            sink,
            confirm_execution,
            dry_run=dry_run or settings.dry_run,
            program=program,
        )
    except DrunError as e:
        sink.emit(Event(Severity.ERROR, str(e)))
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
