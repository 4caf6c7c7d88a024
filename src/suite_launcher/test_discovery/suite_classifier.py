"""Suite classification through a short-lived verifier process."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from suite_launcher.process_launching import (
    Launcher,
    LaunchRequest,
    OutputSink,
    ProcessLauncher,
    ProcessLaunchError,
    format_command,
)

_LOGGER = logging.getLogger(__name__)


class ClassificationError(Exception):
    """Raised when the suite verifier process cannot be run."""


class Classifier(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by the real classifier and test doubles."""

    def is_suite(
        self,
        base_dir: Path,
        classpath: Sequence[str],
        test_output_root: Path,
        class_name: str,
    ) -> bool: ...


class SuiteClassifier:  # pylint: disable=too-few-public-methods
    """Asks the verifier program whether a class is a runnable test suite.

    The verifier receives the test output root and the qualified class name as
    its only two arguments and exits with ``0`` for suites.
    """

    def __init__(
        self,
        *,
        java_executable: str,
        verifier_class: str,
        output_sink: OutputSink,
        launcher: Launcher | None = None,
    ) -> None:
        self._java_executable = java_executable
        self._verifier_class = verifier_class
        self._output_sink = output_sink
        self._launcher = launcher or ProcessLauncher()

    def is_suite(
        self,
        base_dir: Path,
        classpath: Sequence[str],
        test_output_root: Path,
        class_name: str,
    ) -> bool:
        request = LaunchRequest(
            working_dir=base_dir,
            executable=self._java_executable,
            entry_point=self._verifier_class,
            arguments=(str(test_output_root), class_name),
            classpath_elements=tuple(classpath),
            system_properties={"basedir": str(base_dir.absolute())},
        )
        _LOGGER.debug("Verifying %s via: %s", class_name, format_command(request))
        try:
            result = self._launcher.launch(request, output_sink=self._output_sink)
        except ProcessLaunchError as exc:
            raise ClassificationError(
                f"Exception while running suite verifier for {class_name}: {exc}"
            ) from exc
        return result.exit_code == 0
