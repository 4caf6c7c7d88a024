"""Process launching exports."""

from .launch_contracts import LaunchRequest, ProcessResult
from .process_launcher import (
    Launcher,
    OutputSink,
    ProcessLaunchError,
    ProcessLauncher,
    build_command,
    build_environment,
    debug_arguments,
    format_command,
)

__all__ = [
    "LaunchRequest",
    "ProcessResult",
    "Launcher",
    "OutputSink",
    "ProcessLaunchError",
    "ProcessLauncher",
    "build_command",
    "build_environment",
    "debug_arguments",
    "format_command",
]
