"""Translation of a configuration into the test tool's argument vector."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from suite_launcher.configuration.runtime_settings import Configuration, TestSelection

from .selectors import SuiteSelector, TestSelector

RUNPATH_FLAG = "-R"
CONFIG_FLAG_PREFIX = "-D"
TAGS_TO_INCLUDE_FLAG = "-n"
TAGS_TO_EXCLUDE_FLAG = "-l"
PARALLEL_FLAG = "-P"
SUITE_FLAG = "-s"
SUFFIXES_FLAG = "-q"
MEMBERS_ONLY_FLAG = "-m"
WILDCARD_FLAG = "-w"
TESTNG_CONFIG_FLAG = "-b"
MEMORY_FILE_FLAG = "-M"
TESTS_FILE_FLAG = "-A"
SPAN_SCALE_FACTOR_FLAG = "-F"

NEUTRAL_SPAN_SCALE_FACTOR = 1.0


def build_arguments(configuration: Configuration) -> tuple[str, ...]:
    """Build the argument vector for one test tool invocation.

    The group order is fixed so equal configurations always produce equal
    invocations: runpath, config parameters, tags to include, tags to exclude,
    parallel, tests, suites, suffixes, members-only suites, wildcard suites,
    TestNG config files, memory files, tests files, span scale factor.
    """
    selection = configuration.selection
    base_dir = configuration.project.base_dir
    groups: tuple[Iterable[str], ...] = (
        _runpath(configuration),
        _config_parameters(selection.config),
        _compound_argument(TAGS_TO_INCLUDE_FLAG, selection.tags_to_include),
        _compound_argument(TAGS_TO_EXCLUDE_FLAG, selection.tags_to_exclude),
        (PARALLEL_FLAG,) if selection.parallel else (),
        _tests(selection.tests),
        _suites(selection.suites),
        _repeated_argument(SUFFIXES_FLAG, selection.suffixes),
        _repeated_argument(MEMBERS_ONLY_FLAG, selection.members_only_suites),
        _repeated_argument(WILDCARD_FLAG, selection.wildcard_suites),
        _repeated_argument(TESTNG_CONFIG_FLAG, selection.testng_config_files),
        _repeated_argument(MEMORY_FILE_FLAG, selection.memory_files),
        _tests_files(selection.tests_files, base_dir),
        _span_scale_factor(selection),
    )
    return tuple(argument for group in groups for argument in group)


def suite_arguments(suite_name: str) -> tuple[str, str]:
    """Arguments selecting exactly one suite, appended for per-suite forks."""
    return (SUITE_FLAG, suite_name)


def _runpath(configuration: Configuration) -> tuple[str, ...]:
    project = configuration.project
    return _compound_argument(
        RUNPATH_FLAG,
        (
            str(project.output_directory.absolute()),
            str(project.test_output_directory.absolute()),
            *configuration.selection.runpath,
        ),
    )


def _config_parameters(parameters: Mapping[str, str]) -> tuple[str, ...]:
    return tuple(f"{CONFIG_FLAG_PREFIX}{key}={value}" for key, value in parameters.items())


def _compound_argument(flag: str, values: Iterable[str]) -> tuple[str, ...]:
    entries = _non_blank(values)
    if not entries:
        return ()
    return (flag, " ".join(entries))


def _repeated_argument(flag: str, values: Iterable[str]) -> tuple[str, ...]:
    return tuple(token for entry in _non_blank(values) for token in (flag, entry))


def _tests(tests: Iterable[str]) -> tuple[str, ...]:
    arguments: list[str] = []
    for entry in tests:
        selector = TestSelector.parse(entry)
        if selector is not None:
            arguments.extend(selector.to_arguments())
    return tuple(arguments)


def _suites(suites: Iterable[str]) -> tuple[str, ...]:
    arguments: list[str] = []
    for entry in suites:
        selector = SuiteSelector.parse(entry)
        if selector is not None:
            arguments.extend(selector.to_arguments())
    return tuple(arguments)


def _tests_files(tests_files: Iterable[str], base_dir: Path) -> tuple[str, ...]:
    existing = [entry for entry in _non_blank(tests_files) if _resolve(base_dir, entry).exists()]
    return _repeated_argument(TESTS_FILE_FLAG, existing)


def _span_scale_factor(selection: TestSelection) -> tuple[str, ...]:
    factor = selection.span_scale_factor
    if factor == NEUTRAL_SPAN_SCALE_FACTOR:
        return ()
    return (SPAN_SCALE_FACTOR_FLAG, str(factor))


def _resolve(base_dir: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    return candidate if candidate.is_absolute() else base_dir / candidate


def _non_blank(values: Iterable[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]
