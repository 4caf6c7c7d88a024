"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from suite_launcher.configuration.runtime_settings import ForkMode


class RunStatus(str, Enum):
    """Tag describing how a test run ended."""

    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    LAUNCH_FAILED = "launch_failed"
    CLASSIFICATION_FAILED = "classification_failed"
    DEPENDENCY_MISSING = "dependency_missing"
    INVOCATION_FAILED = "invocation_failed"


_NON_FATAL_STATUSES = frozenset({RunStatus.PASSED, RunStatus.FAILED})


@dataclass(frozen=True)
class RunOutcome:  # pylint: disable=too-many-instance-attributes
    """Output contract for one completed test run."""

    status: RunStatus
    fork_mode: ForkMode
    message: str | None = None
    exit_code: int | None = None
    suite: str | None = None
    suites_run: tuple[str, ...] = ()
    skipped_classes: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status is RunStatus.PASSED

    @property
    def is_fatal(self) -> bool:
        """Whether the run aborted instead of reporting test results."""
        return self.status not in _NON_FATAL_STATUSES

    def describe(self) -> str:
        if self.message:
            return self.message
        if self.passed:
            return "All tests passed."
        details = []
        if self.suite:
            details.append(f"suite {self.suite}")
        if self.exit_code is not None:
            details.append(f"exit code {self.exit_code}")
        suffix = f" ({', '.join(details)})" if details else ""
        return f"There are test failures{suffix}."
