"""Run execution domain exports."""

from .in_process_runner import (
    DependencyMissingError,
    InProcessRunner,
    InvocationError,
    invoke_in_process_runner,
    resolve_in_process_runner,
)
from .run_contracts import RunOutcome, RunStatus
from .suite_run_use_case import build_fork_request, execute_test_run

__all__ = [
    "DependencyMissingError",
    "InProcessRunner",
    "InvocationError",
    "invoke_in_process_runner",
    "resolve_in_process_runner",
    "RunOutcome",
    "RunStatus",
    "build_fork_request",
    "execute_test_run",
]
