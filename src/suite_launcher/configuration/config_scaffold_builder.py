"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "suite-launcher.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Test run configuration for suite-launcher.
# Every key is optional. Remove the ones you do not need.

project:
  # Relative paths resolve against this file's directory.
  base_dir: "."
  output_directory: "target/classes"
  test_output_directory: "target/test-classes"
  # Extra test classpath elements (jars or directories), comma separated or a list.
  classpath: []

selection:
  # Extra runpath entries; both output directories are always included.
  runpath: []
  # "SuiteName" or "SuiteName test substring" or "SuiteName @exact test name".
  suites: []
  # "substring" or "@exact test name".
  tests: []
  suffixes: []
  tags_to_include: []
  tags_to_exclude: []
  # key: value pairs passed to the test tool as -Dkey=value.
  config: {}
  parallel: false
  members_only_suites: []
  wildcard_suites: []
  testng_config_files: []
  memory_files: []
  # Entries whose file does not exist are ignored.
  tests_files: []
  span_scale_factor: 1.0

fork:
  # never (in-process), once, or suite-sequential (one process per test class).
  mode: "once"
  java_executable: "java"
  arg_line: ""
  environment_variables: {}
  system_properties: {}
  # 0 disables the timeout.
  timeout_seconds: 0
  log_command: false
  stop_on_first_suite_failure: true
  runner_class: "org.scalatest.tools.Runner"
  suite_verifier_class: "com.diehl.scalatest.forkTools.IsClassATestSuite"
  # module:callable found on the test classpath, used when mode is never.
  in_process_entry_point: "scalatest_runner:run"
  debug:
    enabled: false
    # Replaces the default -Xdebug/-Xrunjdwp arguments when set.
    arg_line: ""
    port: 5005
"""


def build_placeholder_configuration() -> str:
    """Return the commented ``project``/``selection``/``fork`` scaffold.

    Every value in it equals the loader's default, so the file loads as-is
    and runs the project in ``target/test-classes`` in a single fork.
    """
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Create the scaffold for ``generate-config`` and return its resolved path.

    Missing parent directories are created. An existing file is never
    replaced: ``FileExistsError`` names it instead.
    """
    destination = Path(output_path).resolve()
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with destination.open("x", encoding="utf-8") as scaffold:
            scaffold.write(build_placeholder_configuration())
    except FileExistsError as exc:
        raise FileExistsError(f"Configuration file already exists: {destination}") from exc
    return destination
