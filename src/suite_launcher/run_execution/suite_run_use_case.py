"""Test run use-case service: in-process, fork once, or fork per suite."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import click

from suite_launcher.argument_building import build_arguments, suite_arguments
from suite_launcher.configuration.runtime_settings import Configuration, ForkMode
from suite_launcher.process_launching import (
    Launcher,
    LaunchRequest,
    OutputSink,
    ProcessLauncher,
    ProcessLaunchError,
    ProcessResult,
    debug_arguments,
    format_command,
)
from suite_launcher.test_discovery import (
    ClassificationError,
    Classifier,
    SuiteClassifier,
    discover_test_classes,
)

from .in_process_runner import (
    DependencyMissingError,
    InProcessRunner,
    InvocationError,
    invoke_in_process_runner,
    resolve_in_process_runner,
)
from .run_contracts import RunOutcome, RunStatus

RunnerResolver = Callable[[str, Sequence[str]], InProcessRunner]

_LOGGER = logging.getLogger(__name__)


def execute_test_run(
    configuration: Configuration,
    arguments: Sequence[str] | None = None,
    *,
    launcher: Launcher | None = None,
    classifier: Classifier | None = None,
    runner_resolver: RunnerResolver | None = None,
    output_sink: OutputSink | None = None,
) -> RunOutcome:
    """Run the selected tests according to the configured fork mode.

    Fatal conditions are reported through ``RunOutcome.status`` rather than
    raised. Exceptions raised by an in-process test runner propagate unchanged.
    """
    resolved_arguments = (
        tuple(arguments) if arguments is not None else build_arguments(configuration)
    )
    resolved_sink = output_sink or click.echo
    resolved_launcher = launcher or ProcessLauncher()
    mode = configuration.fork.mode
    _LOGGER.debug("Test tool arguments: %s", list(resolved_arguments))

    try:
        if mode is ForkMode.NEVER:
            return _run_in_process(
                configuration,
                resolved_arguments,
                runner_resolver=runner_resolver or resolve_in_process_runner,
            )
        if mode is ForkMode.SUITE_SEQUENTIAL:
            return _run_forking_per_suite(
                configuration,
                resolved_arguments,
                launcher=resolved_launcher,
                classifier=classifier
                or SuiteClassifier(
                    java_executable=configuration.fork.java_executable,
                    verifier_class=configuration.fork.suite_verifier_class,
                    output_sink=resolved_sink,
                    launcher=resolved_launcher,
                ),
                output_sink=resolved_sink,
            )
        return _run_forking_once(
            configuration,
            resolved_arguments,
            launcher=resolved_launcher,
            output_sink=resolved_sink,
        )
    except DependencyMissingError as exc:
        return RunOutcome(status=RunStatus.DEPENDENCY_MISSING, fork_mode=mode, message=str(exc))
    except InvocationError as exc:
        return RunOutcome(status=RunStatus.INVOCATION_FAILED, fork_mode=mode, message=str(exc))
    except ClassificationError as exc:
        return RunOutcome(
            status=RunStatus.CLASSIFICATION_FAILED, fork_mode=mode, message=str(exc)
        )
    except ProcessLaunchError as exc:
        return RunOutcome(status=RunStatus.LAUNCH_FAILED, fork_mode=mode, message=str(exc))


def build_fork_request(
    configuration: Configuration, arguments: Sequence[str]
) -> LaunchRequest:
    """Build the forked test runner invocation for the given arguments."""
    project = configuration.project
    fork = configuration.fork
    system_properties = dict(fork.system_properties)
    system_properties["basedir"] = str(project.base_dir.absolute())
    return LaunchRequest(
        working_dir=project.base_dir,
        executable=fork.java_executable,
        entry_point=fork.runner_class,
        arguments=tuple(arguments),
        classpath_elements=project.test_classpath_elements,
        environment=dict(fork.environment_variables),
        system_properties=system_properties,
        arg_line=fork.arg_line,
        debug_arg_line=debug_arguments(fork.debug),
        timeout_seconds=fork.timeout_seconds,
    )


def _run_in_process(
    configuration: Configuration,
    arguments: Sequence[str],
    *,
    runner_resolver: RunnerResolver,
) -> RunOutcome:
    runner = runner_resolver(
        configuration.fork.in_process_entry_point,
        configuration.project.test_classpath_elements,
    )
    passed = invoke_in_process_runner(runner, arguments)
    return RunOutcome(
        status=RunStatus.PASSED if passed else RunStatus.FAILED,
        fork_mode=ForkMode.NEVER,
    )


def _run_forking_once(
    configuration: Configuration,
    arguments: Sequence[str],
    *,
    launcher: Launcher,
    output_sink: OutputSink,
) -> RunOutcome:
    request = build_fork_request(configuration, arguments)
    _log_command(configuration, f"Forking test runner via: {format_command(request)}")
    result = launcher.launch(request, output_sink=output_sink)
    if result.timed_out:
        return _timed_out(configuration, ForkMode.ONCE)
    return RunOutcome(
        status=RunStatus.PASSED if result.exit_code == 0 else RunStatus.FAILED,
        fork_mode=ForkMode.ONCE,
        exit_code=result.exit_code,
    )


def _run_forking_per_suite(
    configuration: Configuration,
    arguments: Sequence[str],
    *,
    launcher: Launcher,
    classifier: Classifier,
    output_sink: OutputSink,
) -> RunOutcome:
    project = configuration.project
    classpath = project.test_classpath_elements
    suites_run: list[str] = []
    skipped_classes: list[str] = []
    first_failure: tuple[str, ProcessResult] | None = None

    for class_name in discover_test_classes(project.test_output_directory):
        if not classifier.is_suite(
            project.base_dir, classpath, project.test_output_directory, class_name
        ):
            _LOGGER.info("Class %s doesn't appear to be a test suite. Skipping.", class_name)
            skipped_classes.append(class_name)
            continue

        request = build_fork_request(configuration, (*arguments, *suite_arguments(class_name)))
        _log_command(
            configuration,
            f"Forking test runner via: {format_command(request)} "
            f"for possible test suite: {class_name}",
        )
        result = launcher.launch(request, output_sink=output_sink)
        suites_run.append(class_name)
        if result.timed_out:
            return _timed_out(
                configuration,
                ForkMode.SUITE_SEQUENTIAL,
                suite=class_name,
                suites_run=tuple(suites_run),
                skipped_classes=tuple(skipped_classes),
            )
        if result.exit_code != 0:
            _LOGGER.info("Suite %s failed with exit code %s", class_name, result.exit_code)
            if first_failure is None:
                first_failure = (class_name, result)
            if configuration.fork.stop_on_first_suite_failure:
                break

    if first_failure is None:
        return RunOutcome(
            status=RunStatus.PASSED,
            fork_mode=ForkMode.SUITE_SEQUENTIAL,
            exit_code=0,
            suites_run=tuple(suites_run),
            skipped_classes=tuple(skipped_classes),
        )
    failed_suite, failed_result = first_failure
    return RunOutcome(
        status=RunStatus.FAILED,
        fork_mode=ForkMode.SUITE_SEQUENTIAL,
        exit_code=failed_result.exit_code,
        suite=failed_suite,
        suites_run=tuple(suites_run),
        skipped_classes=tuple(skipped_classes),
    )


def _timed_out(
    configuration: Configuration,
    fork_mode: ForkMode,
    *,
    suite: str | None = None,
    suites_run: tuple[str, ...] = (),
    skipped_classes: tuple[str, ...] = (),
) -> RunOutcome:
    timeout_seconds = configuration.fork.timeout_seconds
    target = f" running {suite}" if suite else ""
    return RunOutcome(
        status=RunStatus.TIMED_OUT,
        fork_mode=fork_mode,
        message=(
            f"Timed out after {timeout_seconds} seconds waiting for forked process"
            f"{target} to complete."
        ),
        suite=suite,
        suites_run=suites_run,
        skipped_classes=skipped_classes,
    )


def _log_command(configuration: Configuration, statement: str) -> None:
    if configuration.fork.log_command:
        _LOGGER.info(statement)
    else:
        _LOGGER.debug(statement)
