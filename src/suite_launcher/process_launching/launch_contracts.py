"""Process launch entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType


@dataclass(frozen=True)
class LaunchRequest:  # pylint: disable=too-many-instance-attributes
    """Everything needed to start one external process."""

    working_dir: Path
    executable: str
    entry_point: str
    arguments: tuple[str, ...] = ()
    classpath_elements: tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    system_properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    arg_line: str | None = None
    debug_arg_line: str | None = None
    timeout_seconds: int = 0


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one launched process."""

    exit_code: int | None
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.exit_code == 0
