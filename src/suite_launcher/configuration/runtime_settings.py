"""Configuration domain entities."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

_LOGGER = logging.getLogger(__name__)

DEFAULT_RUNNER_CLASS = "org.scalatest.tools.Runner"
DEFAULT_SUITE_VERIFIER_CLASS = "com.diehl.scalatest.forkTools.IsClassATestSuite"
DEFAULT_IN_PROCESS_ENTRY_POINT = "scalatest_runner:run"
DEFAULT_DEBUGGER_PORT = 5005

_EMPTY_MAPPING: Mapping[str, str] = MappingProxyType({})


class ForkMode(str, Enum):
    """How many processes are spawned to run the selected tests."""

    NEVER = "never"
    ONCE = "once"
    SUITE_SEQUENTIAL = "suite-sequential"

    @classmethod
    def parse(cls, raw: str | None) -> ForkMode:
        """Resolve a configured fork mode, falling back to ``once`` for unknown values."""
        if raw is None:
            return cls.ONCE
        normalized = str(raw).strip().lower()
        mode = _FORK_MODE_ALIASES.get(normalized)
        if mode is None:
            _LOGGER.warning('Invalid fork mode: "%s"; using once instead.', raw)
            return cls.ONCE
        return mode


_FORK_MODE_ALIASES: dict[str, ForkMode] = {
    "never": ForkMode.NEVER,
    "in-process": ForkMode.NEVER,
    "once": ForkMode.ONCE,
    "fork-once": ForkMode.ONCE,
    "suite-sequential": ForkMode.SUITE_SEQUENTIAL,
    "fork-per-suite": ForkMode.SUITE_SEQUENTIAL,
}


@dataclass(frozen=True)
class ProjectLayout:
    """Directories and classpath of the project under test."""

    base_dir: Path
    output_directory: Path
    test_output_directory: Path
    classpath: tuple[str, ...] = ()

    @property
    def test_classpath_elements(self) -> tuple[str, ...]:
        return (
            str(self.test_output_directory),
            str(self.output_directory),
            *self.classpath,
        )


@dataclass(frozen=True)
class TestSelection:  # pylint: disable=too-many-instance-attributes
    """Which suites and tests the test tool should run, and how."""

    __test__ = False

    runpath: tuple[str, ...] = ()
    suites: tuple[str, ...] = ()
    tests: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()
    tags_to_include: tuple[str, ...] = ()
    tags_to_exclude: tuple[str, ...] = ()
    config: Mapping[str, str] = field(default_factory=lambda: _EMPTY_MAPPING)
    parallel: bool = False
    members_only_suites: tuple[str, ...] = ()
    wildcard_suites: tuple[str, ...] = ()
    testng_config_files: tuple[str, ...] = ()
    memory_files: tuple[str, ...] = ()
    tests_files: tuple[str, ...] = ()
    span_scale_factor: float = 1.0


@dataclass(frozen=True)
class DebugSettings:
    """Remote-debugging options for forked processes."""

    enabled: bool = False
    arg_line: str | None = None
    port: int = DEFAULT_DEBUGGER_PORT


@dataclass(frozen=True)
class ForkSettings:  # pylint: disable=too-many-instance-attributes
    """Process management options."""

    mode: ForkMode = ForkMode.ONCE
    java_executable: str = "java"
    arg_line: str | None = None
    environment_variables: Mapping[str, str] = field(default_factory=lambda: _EMPTY_MAPPING)
    system_properties: Mapping[str, str] = field(default_factory=lambda: _EMPTY_MAPPING)
    debug: DebugSettings = field(default_factory=DebugSettings)
    timeout_seconds: int = 0
    log_command: bool = False
    runner_class: str = DEFAULT_RUNNER_CLASS
    suite_verifier_class: str = DEFAULT_SUITE_VERIFIER_CLASS
    in_process_entry_point: str = DEFAULT_IN_PROCESS_ENTRY_POINT
    stop_on_first_suite_failure: bool = True


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    project: ProjectLayout
    selection: TestSelection = field(default_factory=TestSelection)
    fork: ForkSettings = field(default_factory=ForkSettings)
    path: Path | None = None
