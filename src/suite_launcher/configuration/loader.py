"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_DEBUGGER_PORT,
    DEFAULT_IN_PROCESS_ENTRY_POINT,
    DEFAULT_RUNNER_CLASS,
    DEFAULT_SUITE_VERIFIER_CLASS,
    Configuration,
    DebugSettings,
    ForkMode,
    ForkSettings,
    ProjectLayout,
    TestSelection,
)

DEFAULT_OUTPUT_DIRECTORY = "target/classes"
DEFAULT_TEST_OUTPUT_DIRECTORY = "target/test-classes"

_SELECTION_LIST_FIELDS = (
    "runpath",
    "suites",
    "tests",
    "suffixes",
    "tags_to_include",
    "tags_to_exclude",
    "members_only_suites",
    "wildcard_suites",
    "testng_config_files",
    "memory_files",
    "tests_files",
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    project = _parse_project_section(parsed.get("project"), path.resolve().parent)
    selection = _parse_selection_section(parsed.get("selection"))
    fork = _parse_fork_section(parsed.get("fork"))

    return Configuration(project=project, selection=selection, fork=fork, path=path.resolve())


def _parse_project_section(value: Any, config_dir: Path) -> ProjectLayout:
    section = _optional_mapping(value, "project")
    base_dir_raw = _optional_string(section.get("base_dir"), "project.base_dir")
    base_dir = _resolve_path(config_dir, base_dir_raw) if base_dir_raw else config_dir
    output_directory = _resolve_path(
        base_dir,
        _optional_string(section.get("output_directory"), "project.output_directory")
        or DEFAULT_OUTPUT_DIRECTORY,
    )
    test_output_directory = _resolve_path(
        base_dir,
        _optional_string(section.get("test_output_directory"), "project.test_output_directory")
        or DEFAULT_TEST_OUTPUT_DIRECTORY,
    )
    classpath = _normalize_string_sequence(section.get("classpath"), "project.classpath")
    return ProjectLayout(
        base_dir=base_dir,
        output_directory=output_directory,
        test_output_directory=test_output_directory,
        classpath=tuple(str(_resolve_path(base_dir, entry)) for entry in classpath),
    )


def _parse_selection_section(value: Any) -> TestSelection:
    section = _optional_mapping(value, "selection")
    lists = {
        name: _normalize_string_sequence(section.get(name), f"selection.{name}")
        for name in _SELECTION_LIST_FIELDS
    }
    return TestSelection(
        config=_normalize_config_parameters(section.get("config")),
        parallel=_optional_bool(section.get("parallel"), "selection.parallel", default=False),
        span_scale_factor=_optional_float(
            section.get("span_scale_factor"), "selection.span_scale_factor", default=1.0
        ),
        **lists,
    )


def _parse_fork_section(value: Any) -> ForkSettings:
    section = _optional_mapping(value, "fork")
    mode_raw = section.get("mode")
    return ForkSettings(
        mode=ForkMode.parse(None if mode_raw is None else str(mode_raw)),
        java_executable=_optional_string(section.get("java_executable"), "fork.java_executable")
        or "java",
        arg_line=_optional_string(section.get("arg_line"), "fork.arg_line"),
        environment_variables=_normalize_string_mapping(
            section.get("environment_variables"), "fork.environment_variables"
        ),
        system_properties=_normalize_string_mapping(
            section.get("system_properties"), "fork.system_properties"
        ),
        debug=_parse_debug_section(section.get("debug")),
        timeout_seconds=_optional_non_negative_int(
            section.get("timeout_seconds"), "fork.timeout_seconds", default=0
        ),
        log_command=_optional_bool(section.get("log_command"), "fork.log_command", default=False),
        runner_class=_optional_string(section.get("runner_class"), "fork.runner_class")
        or DEFAULT_RUNNER_CLASS,
        suite_verifier_class=_optional_string(
            section.get("suite_verifier_class"), "fork.suite_verifier_class"
        )
        or DEFAULT_SUITE_VERIFIER_CLASS,
        in_process_entry_point=_optional_string(
            section.get("in_process_entry_point"), "fork.in_process_entry_point"
        )
        or DEFAULT_IN_PROCESS_ENTRY_POINT,
        stop_on_first_suite_failure=_optional_bool(
            section.get("stop_on_first_suite_failure"),
            "fork.stop_on_first_suite_failure",
            default=True,
        ),
    )


def _parse_debug_section(value: Any) -> DebugSettings:
    section = _optional_mapping(value, "fork.debug")
    port = _optional_non_negative_int(
        section.get("port"), "fork.debug.port", default=DEFAULT_DEBUGGER_PORT
    )
    if port == 0:
        raise ConfigurationError("fork.debug.port must be greater than zero.")
    return DebugSettings(
        enabled=_optional_bool(section.get("enabled"), "fork.debug.enabled", default=False),
        arg_line=_optional_string(section.get("arg_line"), "fork.debug.arg_line"),
        port=port,
    )


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(",") if item.strip())
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _normalize_config_parameters(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if isinstance(value, str):
        parameters: dict[str, str] = {}
        for pair in (item.strip() for item in value.split(",")):
            if not pair:
                continue
            key, separator, entry = pair.partition("=")
            if not separator or not key.strip():
                raise ConfigurationError(
                    f"selection.config entries must use the key=value format: '{pair}'"
                )
            parameters[key.strip()] = entry.strip()
        return parameters
    return _normalize_string_mapping(value, "selection.config")


def _normalize_string_mapping(value: Any, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{field_name} must be a mapping.")
    normalized: dict[str, str] = {}
    for key, entry in value.items():
        if entry is None or isinstance(entry, (Mapping, list)):
            raise ConfigurationError(f"{field_name}.{key} must be a scalar value.")
        normalized[str(key)] = _scalar_text(entry)
    return normalized


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _optional_bool(value: Any, field_name: str, *, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value


def _optional_float(value: Any, field_name: str, *, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)


def _optional_non_negative_int(value: Any, field_name: str, *, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return value
