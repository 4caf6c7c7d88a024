"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from click.testing import CliRunner
from suite_launcher.cli import cli
from suite_launcher.configuration import ForkMode
from suite_launcher.run_execution import RunOutcome, RunStatus

_IN_PROCESS_RUNNER = """import json
from pathlib import Path


def run(args):
    Path(__file__).with_name("received.json").write_text(json.dumps(args), encoding="utf-8")
    return "FailingSuite" not in args
"""


def _write_project(tmp_path: Path, **fork) -> Path:
    test_classes = tmp_path / "target" / "test-classes"
    (test_classes / "pkg").mkdir(parents=True)
    (test_classes / "pkg" / "ASuite.class").write_bytes(b"")
    (test_classes / "pkg" / "ASuite$1.class").write_bytes(b"")
    (test_classes / "pkg" / "Helper.class").write_bytes(b"")
    (test_classes / "cli_inproc_runner.py").write_text(_IN_PROCESS_RUNNER, encoding="utf-8")
    config = {
        "selection": {"suites": ["pkg.ASuite"], "tags_to_exclude": "Slow, Flaky"},
        "fork": {"mode": "never", "in_process_entry_point": "cli_inproc_runner:run", **fork},
    }
    path = tmp_path / "suite-launcher.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


def test_generate_config_command_writes_loadable_file_with_default_name(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("suite-launcher.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        assert str(output_path) in result.output
        content = output_path.read_text(encoding="utf-8")
        for section in ("project:", "selection:", "fork:", "debug:"):
            assert section in content

        arguments = runner.invoke(cli, ["arguments", "--config", str(output_path)])

    assert arguments.exit_code == 0
    assert arguments.output.splitlines() == [
        "-R",
        f"{output_path.parent / 'target' / 'classes'} "
        f"{output_path.parent / 'target' / 'test-classes'}",
    ]


def test_generate_config_command_fails_when_output_file_already_exists(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "suite-launcher.yaml"
    output_path.write_text("already-there", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert "already exists" in str(result.exception).lower()
    assert output_path.read_text(encoding="utf-8") == "already-there"


def test_arguments_command_prints_one_token_per_line(tmp_path: Path) -> None:
    config_path = _write_project(tmp_path)

    result = CliRunner().invoke(cli, ["arguments", "--config", str(config_path)])

    assert result.exit_code == 0
    assert result.output.splitlines()[2:] == ["-l", "Slow Flaky", "-s", "pkg.ASuite"]


def test_discover_command_lists_top_level_classes(tmp_path: Path) -> None:
    config_path = _write_project(tmp_path)

    result = CliRunner().invoke(cli, ["discover", "--config", str(config_path)])

    assert result.exit_code == 0
    assert result.output.splitlines() == ["cli_inproc_runner.py", "pkg.ASuite", "pkg.Helper"]


def test_run_command_in_process_passes_arguments_to_runner(tmp_path: Path) -> None:
    config_path = _write_project(tmp_path)

    result = CliRunner().invoke(cli, ["run", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "All tests passed." in result.output
    received = json.loads(
        (tmp_path / "target" / "test-classes" / "received.json").read_text(encoding="utf-8")
    )
    assert received[0] == "-R"
    assert received[2:] == ["-l", "Slow Flaky", "-s", "pkg.ASuite"]


def test_run_command_suite_override_reports_failures(tmp_path: Path) -> None:
    config_path = _write_project(tmp_path)

    result = CliRunner().invoke(
        cli, ["run", "--config", str(config_path), "--suites", "FailingSuite"]
    )

    assert result.exit_code == 1
    assert "There are test failures" in str(result.exception)


def test_run_command_reports_missing_in_process_runner(tmp_path: Path) -> None:
    config_path = _write_project(tmp_path, in_process_entry_point="absent_runner:run")

    result = CliRunner().invoke(cli, ["run", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "absent_runner:run is missing from the test classpath" in str(result.exception)


def test_run_command_applies_overrides(tmp_path: Path, monkeypatch) -> None:
    config_path = _write_project(tmp_path)
    captured = []

    def _fake_execute(configuration):
        captured.append(configuration)
        return RunOutcome(status=RunStatus.PASSED, fork_mode=configuration.fork.mode)

    monkeypatch.setattr("suite_launcher.cli.execute_test_run", _fake_execute)

    result = CliRunner().invoke(
        cli,
        [
            "run",
            "--config",
            str(config_path),
            "--fork-mode",
            "suite-sequential",
            "--tests",
            "alpha, @exact beta",
            "--timeout",
            "30",
            "--log-command",
            "--continue-on-failure",
        ],
    )

    assert result.exit_code == 0
    (configuration,) = captured
    assert configuration.fork.mode is ForkMode.SUITE_SEQUENTIAL
    assert configuration.fork.timeout_seconds == 30
    assert configuration.fork.log_command is True
    assert configuration.fork.stop_on_first_suite_failure is False
    assert configuration.selection.tests == ("alpha", "@exact beta")
    assert configuration.selection.suites == ("pkg.ASuite",)


def test_run_command_reports_timeouts(tmp_path: Path, monkeypatch) -> None:
    config_path = _write_project(tmp_path)
    monkeypatch.setattr(
        "suite_launcher.cli.execute_test_run",
        lambda configuration: RunOutcome(
            status=RunStatus.TIMED_OUT,
            fork_mode=ForkMode.ONCE,
            message="Timed out after 5 seconds waiting for forked process to complete.",
        ),
    )

    result = CliRunner().invoke(cli, ["run", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Timed out after 5 seconds" in str(result.exception)
