"""Resolution and invocation of an in-process test tool entry point."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from importlib.machinery import PathFinder
from types import ModuleType
from typing import Protocol, cast

_LOGGER = logging.getLogger(__name__)

ENTRY_POINT_SEPARATOR = ":"


class DependencyMissingError(Exception):
    """Raised when the entry point cannot be found on the test classpath."""


class InvocationError(Exception):
    """Raised when the entry point cannot be invoked or returns an unusable result."""


class InProcessRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Callable accepting the argument vector and returning whether all tests passed."""

    def __call__(self, args: list[str]) -> bool: ...


def resolve_in_process_runner(entry_point: str, search_path: Sequence[str]) -> InProcessRunner:
    """Load ``module:callable`` from the test classpath.

    The entry module itself is looked up on the test classpath only, so a
    runner installed next to this tool but absent from the project's test
    classpath is reported missing. While the module loads, and again whenever
    the returned runner is called, the test classpath is searched ahead of
    ``sys.path`` for the runner's own imports. Modules loaded that way are
    dropped afterwards and host modules of the same name are put back.
    """
    module_name, separator, attribute = entry_point.partition(ENTRY_POINT_SEPARATOR)
    if not separator or not module_name.strip() or not attribute.strip():
        raise DependencyMissingError(
            f"Invalid entry point '{entry_point}'; expected the module:callable format."
        )
    locations = [str(entry) for entry in search_path]
    with _classpath_imports(locations):
        module = _load_module(module_name.strip(), locations, entry_point)
    target: object = module
    for part in attribute.strip().split("."):
        if not hasattr(target, part):
            raise DependencyMissingError(f"{entry_point} is missing from the test classpath")
        target = getattr(target, part)
    if not callable(target):
        raise DependencyMissingError(f"{entry_point} is not callable")
    _LOGGER.debug("Resolved in-process entry point %s from %s", entry_point, module.__file__)
    return _ClasspathRunner(cast(InProcessRunner, target), locations)


def invoke_in_process_runner(runner: InProcessRunner, arguments: Sequence[str]) -> bool:
    """Call the runner synchronously; its own exceptions propagate unchanged."""
    try:
        result = runner(list(arguments))
    except SystemExit as exc:
        raise InvocationError(f"Test runner exited with status {exc.code!r}") from exc
    if not isinstance(result, bool):
        raise InvocationError(
            f"Test runner returned {type(result).__name__} instead of a boolean result"
        )
    return result


class _ClasspathRunner:  # pylint: disable=too-few-public-methods
    """Calls the resolved target with the test classpath on the import path."""

    def __init__(self, target: InProcessRunner, locations: list[str]) -> None:
        self._target = target
        self._locations = locations

    def __call__(self, args: list[str]) -> bool:
        with _classpath_imports(self._locations):
            return self._target(args)


@contextmanager
def _classpath_imports(locations: list[str]) -> Iterator[None]:
    saved_path = list(sys.path)
    saved_modules = dict(sys.modules)
    sys.path[:0] = locations
    importlib.invalidate_caches()
    try:
        yield
    finally:
        sys.path[:] = saved_path
        for name in set(sys.modules) - saved_modules.keys():
            del sys.modules[name]
        for name, module in saved_modules.items():
            if sys.modules.get(name) is not module:
                sys.modules[name] = module


def _load_module(module_name: str, locations: list[str], entry_point: str) -> ModuleType:
    search: list[str] | None = locations
    module: ModuleType | None = None
    qualified = ""
    for part in module_name.split("."):
        qualified = f"{qualified}.{part}" if qualified else part
        spec = PathFinder.find_spec(qualified, search)
        if spec is None or spec.loader is None:
            raise DependencyMissingError(f"{entry_point} is missing from the test classpath")
        module = importlib.util.module_from_spec(spec)
        sys.modules[qualified] = module
        try:
            spec.loader.exec_module(module)
        except ImportError as exc:
            raise DependencyMissingError(
                f"{entry_point} could not be loaded from the test classpath: {exc}"
            ) from exc
        search = list(spec.submodule_search_locations or [])
    if module is None:
        raise DependencyMissingError(f"{entry_point} is missing from the test classpath")
    return module
