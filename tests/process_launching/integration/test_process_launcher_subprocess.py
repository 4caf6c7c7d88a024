"""Process launcher tests against real child processes."""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path

import pytest
from suite_launcher.process_launching import LaunchRequest, ProcessLauncher, ProcessLaunchError


def _python_request(tmp_path: Path, script: str, **overrides) -> LaunchRequest:
    defaults = {
        "working_dir": tmp_path,
        "executable": sys.executable,
        "entry_point": "-c",
        "arguments": (script,),
        "classpath_elements": (str(tmp_path / "test-classes"), str(tmp_path / "classes")),
    }
    defaults.update(overrides)
    return LaunchRequest(**defaults)


def test_launch_streams_both_output_streams_and_reports_exit_code(tmp_path: Path) -> None:
    lines: list[str] = []
    script = (
        "import sys\n"
        "print('first stdout line', flush=True)\n"
        "print('stderr line', file=sys.stderr, flush=True)\n"
        "print('second stdout line', flush=True)\n"
        "sys.exit(3)\n"
    )

    result = ProcessLauncher().launch(_python_request(tmp_path, script), output_sink=lines.append)

    assert result.exit_code == 3
    assert result.timed_out is False
    assert sorted(lines) == ["first stdout line", "second stdout line", "stderr line"]
    assert lines.index("first stdout line") < lines.index("second stdout line")


def test_launch_exports_classpath_and_environment_in_working_dir(tmp_path: Path) -> None:
    lines: list[str] = []
    script = (
        "import os\n"
        "print(os.environ['CLASSPATH'])\n"
        "print(os.environ['SUITE_LAUNCHER_TEST'])\n"
        "print(os.getcwd())\n"
    )

    result = ProcessLauncher().launch(
        _python_request(tmp_path, script, environment={"SUITE_LAUNCHER_TEST": "value"}),
        output_sink=lines.append,
    )

    assert result.exit_code == 0
    assert lines[0].split(os.pathsep) == [
        str(tmp_path / "test-classes"),
        str(tmp_path / "classes"),
    ]
    assert lines[1] == "value"
    assert Path(lines[2]).resolve() == tmp_path.resolve()


def test_launch_forwards_lines_before_the_process_exits(tmp_path: Path) -> None:
    arrivals: list[float] = []
    script = "import time\nprint('early', flush=True)\ntime.sleep(1.5)\nprint('late', flush=True)\n"

    started = time.monotonic()
    ProcessLauncher().launch(
        _python_request(tmp_path, script),
        output_sink=lambda line: arrivals.append(time.monotonic() - started),
    )

    assert len(arrivals) == 2
    assert arrivals[1] - arrivals[0] >= 1.0


def test_launch_kills_process_after_timeout(tmp_path: Path) -> None:
    started = time.monotonic()

    result = ProcessLauncher().launch(
        _python_request(tmp_path, "import time\ntime.sleep(30)\n", timeout_seconds=1),
        output_sink=lambda line: None,
    )

    assert result.timed_out is True
    assert result.exit_code is None
    assert time.monotonic() - started < 20


def test_launch_without_timeout_waits_for_completion(tmp_path: Path) -> None:
    result = ProcessLauncher().launch(
        _python_request(tmp_path, "import time\ntime.sleep(0.5)\n", timeout_seconds=0),
        output_sink=lambda line: None,
    )

    assert result.exit_code == 0
    assert result.timed_out is False


def test_launch_failure_is_fatal(tmp_path: Path) -> None:
    request = _python_request(tmp_path, "", executable=str(tmp_path / "missing-java"))

    with pytest.raises(ProcessLaunchError, match="missing-java"):
        ProcessLauncher().launch(request, output_sink=lambda line: None)


def test_launch_returns_when_a_grandchild_keeps_the_pipes_open(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(
        "suite_launcher.process_launching.process_launcher._READER_JOIN_TIMEOUT_SECONDS", 0.2
    )
    script = (
        "import subprocess, sys\n"
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(3)'])\n"
        "print('parent done', flush=True)\n"
    )

    started = time.monotonic()
    with caplog.at_level(logging.DEBUG, logger="suite_launcher"):
        result = ProcessLauncher().launch(
            _python_request(tmp_path, script), output_sink=lambda line: None
        )

    assert result.exit_code == 0
    assert time.monotonic() - started < 2.5
    assert any(
        "still running after 0.2 seconds" in record.getMessage() for record in caplog.records
    )
