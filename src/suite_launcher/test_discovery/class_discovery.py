"""Discovery of compiled test classes below a class output directory."""

from __future__ import annotations

import os
from pathlib import Path

CLASS_FILE_EXTENSION = ".class"
NESTED_CLASS_MARKER = "$"
QUALIFIER_SEPARATOR = "."


def discover_test_classes(root: Path | str) -> tuple[str, ...]:
    """Return the sorted, deduplicated qualified names of every file under ``root``.

    Nested and anonymous classes (``Outer$Inner.class``, ``Outer$1.class``)
    collapse onto their enclosing class. A missing root yields no classes.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        return ()
    names = {qualified_class_name(root_path, file_path) for file_path in _walk_files(root_path)}
    return tuple(sorted(names))


def qualified_class_name(root: Path, file_path: Path) -> str:
    """Derive ``com.example.FooSuite`` from ``<root>/com/example/FooSuite.class``."""
    name = QUALIFIER_SEPARATOR.join(file_path.relative_to(root).parts)
    marker_index = name.find(NESTED_CLASS_MARKER)
    if marker_index > -1:
        name = name[:marker_index]
    return name.removesuffix(CLASS_FILE_EXTENSION)


def _walk_files(root: Path) -> list[Path]:
    collected: list[Path] = []
    for directory, _, file_names in os.walk(root):
        collected.extend(Path(directory) / file_name for file_name in file_names)
    return collected
