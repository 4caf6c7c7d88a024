"""Command line interface entry point."""

from __future__ import annotations

import dataclasses
import logging
import sys

import click

from suite_launcher.argument_building import build_arguments
from suite_launcher.configuration import (
    DEFAULT_CONFIG_FILENAME,
    Configuration,
    ConfigurationError,
    ForkMode,
    load_configuration,
    write_placeholder_configuration,
)
from suite_launcher.run_execution import execute_test_run
from suite_launcher.test_discovery import discover_test_classes

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


def _config_option(function):
    return click.option(
        "--config",
        "config_path",
        required=True,
        type=click.Path(path_type=str),
        help="Path to the YAML test run configuration",
    )(function)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="suite-launcher")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for launcher diagnostics",
)
def cli(log_level: str) -> None:
    """Launch test runners in-process, in one fork, or in one fork per suite."""
    logging.basicConfig(level=log_level.upper(), format="[%(levelname)s] %(name)s: %(message)s")


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a YAML configuration listing every option with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="arguments")
@_config_option
def show_arguments(config_path: str) -> None:
    """Print the test runner argument vector, one token per line."""
    configuration = _load(config_path)
    for argument in build_arguments(configuration):
        click.echo(argument)


@cli.command(name="discover")
@_config_option
def discover(config_path: str) -> None:
    """List the class names found under the test output directory."""
    configuration = _load(config_path)
    for class_name in discover_test_classes(configuration.project.test_output_directory):
        click.echo(class_name)


@cli.command(name="run")
@_config_option
@click.option("--fork-mode", "fork_mode", help="never, once or suite-sequential")
@click.option("--suites", help="Comma separated suites, replacing the configured ones")
@click.option("--tests", help="Comma separated tests, replacing the configured ones")
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.IntRange(min=0),
    help="Seconds before a forked process is killed (0 disables)",
)
@click.option("--log-command", is_flag=True, default=False, help="Log forked commands at INFO.")
@click.option(
    "--continue-on-failure",
    is_flag=True,
    default=False,
    help="Keep running remaining suites after a failing suite in suite-sequential mode.",
)
def run_tests(  # pylint: disable=too-many-arguments
    config_path: str,
    fork_mode: str | None,
    suites: str | None,
    tests: str | None,
    timeout_seconds: int | None,
    log_command: bool,
    continue_on_failure: bool,
) -> None:
    """Run the selected tests and report whether they all passed."""
    configuration = _apply_overrides(
        _load(config_path),
        fork_mode=fork_mode,
        suites=suites,
        tests=tests,
        timeout_seconds=timeout_seconds,
        log_command=log_command,
        continue_on_failure=continue_on_failure,
    )
    outcome = execute_test_run(configuration)
    if not outcome.passed:
        raise CliError(outcome.describe())
    click.echo(outcome.describe())


def _load(config_path: str) -> Configuration:
    try:
        return load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise CliError(str(exc)) from exc


def _apply_overrides(  # pylint: disable=too-many-arguments
    configuration: Configuration,
    *,
    fork_mode: str | None,
    suites: str | None,
    tests: str | None,
    timeout_seconds: int | None,
    log_command: bool,
    continue_on_failure: bool,
) -> Configuration:
    selection = configuration.selection
    if suites is not None:
        selection = dataclasses.replace(selection, suites=_split_on_comma(suites))
    if tests is not None:
        selection = dataclasses.replace(selection, tests=_split_on_comma(tests))

    fork = configuration.fork
    if fork_mode is not None:
        fork = dataclasses.replace(fork, mode=ForkMode.parse(fork_mode))
    if timeout_seconds is not None:
        fork = dataclasses.replace(fork, timeout_seconds=timeout_seconds)
    if log_command:
        fork = dataclasses.replace(fork, log_command=True)
    if continue_on_failure:
        fork = dataclasses.replace(fork, stop_on_first_suite_failure=False)
    return dataclasses.replace(configuration, selection=selection, fork=fork)


def _split_on_comma(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
