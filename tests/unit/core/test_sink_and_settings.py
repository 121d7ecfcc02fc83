import io
import logging

import pytest
from rich.console import Console

from drun.core.settings import DrunSettings
from drun.core.sink import ConsoleSink, Event, LoggingSink, OutputSink, Severity


def _console():
    buf = io.StringIO()
    return Console(file=buf, width=40, color_system=None, highlight=False), buf


# --- ConsoleSink ---


@pytest.mark.parametrize(
    "severity, tag",
    [
        (Severity.INFO, "[INFO]"),
        (Severity.SUCCESS, "[SUCCESS]"),
        (Severity.WARNING, "[WARNING]"),
        (Severity.ERROR, "[ERROR]"),
    ],
)
def test_console_sink_tags(severity, tag):
    console, buf = _console()
    ConsoleSink(console).emit(Event(severity, "hello"))
    assert buf.getvalue() == f"{tag} hello\n"


def test_console_sink_does_not_interpret_markup_in_messages():
    console, buf = _console()
    ConsoleSink(console).emit(Event(Severity.INFO, "image [red]x[/red]"))
    assert "image [red]x[/red]" in buf.getvalue()


def test_console_sink_renders_command_on_one_line():
    """
    Long commands must not be wrapped at the console width, so the operator
    can copy the line into a shell.
    """
    console, buf = _console()
    command = "docker run -d --name app -e 'A=1' " + "-v /a:/a " * 10 + "app:latest"
    ConsoleSink(console).emit(Event(Severity.INFO, "ready", command=command))

    lines = buf.getvalue().splitlines()
    assert lines[0] == "[INFO] ready"
    assert lines[1] == "Generated command:"
    assert lines[2] == command


def test_sinks_satisfy_protocol():
    assert isinstance(ConsoleSink(Console(file=io.StringIO())), OutputSink)
    assert isinstance(LoggingSink(), OutputSink)


# --- LoggingSink ---


def test_logging_sink_maps_severity(caplog):
    target = logging.getLogger("drun.test.sink")
    sink = LoggingSink(target)

    with caplog.at_level(logging.DEBUG, logger="drun.test.sink"):
        sink.emit(Event(Severity.INFO, "info"))
        sink.emit(Event(Severity.SUCCESS, "done"))
        sink.emit(Event(Severity.WARNING, "careful"))
        sink.emit(Event(Severity.ERROR, "boom"))
        sink.emit(Event(Severity.INFO, "ready", command="docker run -d img"))

    assert [r.levelno for r in caplog.records] == [
        logging.INFO,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.INFO,
    ]
    assert caplog.records[-1].getMessage() == "ready: docker run -d img"


# --- Settings ---


def test_settings_defaults(monkeypatch):
    for var in ("DRUN_DOCKER_BIN", "DRUN_BACKEND", "DRUN_DRY_RUN", "DRUN_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    assert DrunSettings.from_env() == DrunSettings()


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DRUN_DOCKER_BIN", "/opt/bin/docker")
    monkeypatch.setenv("DRUN_BACKEND", "SDK")
    monkeypatch.setenv("DRUN_DRY_RUN", "yes")
    monkeypatch.setenv("DRUN_LOG_LEVEL", "debug")

    settings = DrunSettings.from_env()

    assert settings.docker_bin == "/opt/bin/docker"
    assert settings.backend == "sdk"
    assert settings.dry_run is True
    assert settings.log_level == "DEBUG"


def test_settings_ignore_unknown_backend(monkeypatch):
    monkeypatch.setenv("DRUN_BACKEND", "podman")
    assert DrunSettings.from_env().backend == "cli"
