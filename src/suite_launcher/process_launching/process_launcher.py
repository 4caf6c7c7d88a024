"""External process launching with output streaming and timeouts."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import threading
from collections.abc import Callable
from typing import IO, Protocol

from suite_launcher.configuration.runtime_settings import DebugSettings

from .launch_contracts import LaunchRequest, ProcessResult

OutputSink = Callable[[str], None]

CLASSPATH_VARIABLE = "CLASSPATH"
SYSTEM_PROPERTY_PREFIX = "-D"
DEFAULT_DEBUG_ARG_LINE = "-Xdebug -Xrunjdwp:transport=dt_socket,server=y,suspend=y,address={port}"

_READER_JOIN_TIMEOUT_SECONDS = 5.0

_LOGGER = logging.getLogger(__name__)


class ProcessLaunchError(Exception):
    """Raised when an external process cannot be started."""


class Launcher(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by the real launcher and test doubles."""

    def launch(self, request: LaunchRequest, *, output_sink: OutputSink) -> ProcessResult: ...


def build_command(request: LaunchRequest) -> list[str]:
    """Compose the command line: system properties, arg lines, entry point, arguments."""
    command = [request.executable]
    command.extend(
        f"{SYSTEM_PROPERTY_PREFIX}{key}={value}"
        for key, value in request.system_properties.items()
    )
    if request.arg_line:
        command.extend(shlex.split(request.arg_line))
    if request.debug_arg_line:
        command.extend(shlex.split(request.debug_arg_line))
    command.append(request.entry_point)
    command.extend(request.arguments)
    return command


def build_environment(request: LaunchRequest) -> dict[str, str]:
    """Inherit the current environment, overlay caller variables, then set the classpath."""
    environment = dict(os.environ)
    environment.update(request.environment)
    environment[CLASSPATH_VARIABLE] = os.pathsep.join(request.classpath_elements)
    return environment


def debug_arguments(debug: DebugSettings) -> str | None:
    """Return the debug argument line, or ``None`` when debugging is disabled."""
    if not debug.enabled:
        return None
    if debug.arg_line:
        return debug.arg_line
    return DEFAULT_DEBUG_ARG_LINE.format(port=debug.port)


def format_command(request: LaunchRequest) -> str:
    return shlex.join(build_command(request))


class ProcessLauncher:  # pylint: disable=too-few-public-methods
    """Runs a process to completion, streaming both output streams line by line."""

    def launch(self, request: LaunchRequest, *, output_sink: OutputSink) -> ProcessResult:
        command = build_command(request)
        try:
            process = subprocess.Popen(  # pylint: disable=consider-using-with
                command,
                cwd=request.working_dir,
                env=build_environment(request),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ProcessLaunchError(
                f"Exception while executing forked process: {shlex.join(command)}: {exc}"
            ) from exc

        serialized_sink = _serialized(output_sink)
        readers = [
            _start_reader(process.stdout, serialized_sink),
            _start_reader(process.stderr, serialized_sink),
        ]
        timeout = request.timeout_seconds if request.timeout_seconds > 0 else None
        try:
            exit_code = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            _LOGGER.debug("Killing process %s after %s seconds", process.pid, timeout)
            process.kill()
            process.wait()
            _join_readers(readers)
            return ProcessResult(exit_code=None, timed_out=True)
        _join_readers(readers)
        return ProcessResult(exit_code=exit_code)


def _serialized(output_sink: OutputSink) -> OutputSink:
    lock = threading.Lock()

    def _emit(line: str) -> None:
        with lock:
            output_sink(line)

    return _emit


def _start_reader(stream: IO[str] | None, output_sink: OutputSink) -> threading.Thread:
    reader = threading.Thread(target=_forward_lines, args=(stream, output_sink), daemon=True)
    reader.start()
    return reader


def _forward_lines(stream: IO[str] | None, output_sink: OutputSink) -> None:
    if stream is None:
        return
    with stream:
        for line in stream:
            output_sink(line.rstrip("\r\n"))


def _join_readers(readers: list[threading.Thread]) -> None:
    for reader in readers:
        reader.join(timeout=_READER_JOIN_TIMEOUT_SECONDS)
        if reader.is_alive():
            _LOGGER.debug(
                "Output reader %s still running after %s seconds; stream held open elsewhere",
                reader.name,
                _READER_JOIN_TIMEOUT_SECONDS,
            )
