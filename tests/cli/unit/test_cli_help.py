"""CLI smoke tests."""

from click.testing import CliRunner
from suite_launcher.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("generate-config", "arguments", "discover", "run"):
        assert command in result.output
    assert "--log-level" in result.output


def test_run_help_lists_overrides() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "--help"])

    assert result.exit_code == 0
    for option in ("--fork-mode", "--suites", "--tests", "--timeout", "--continue-on-failure"):
        assert option in result.output
