"""Fork mode parsing tests."""

from __future__ import annotations

import logging

import pytest
from suite_launcher.configuration import ForkMode


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("never", ForkMode.NEVER),
        ("in-process", ForkMode.NEVER),
        ("once", ForkMode.ONCE),
        ("fork-once", ForkMode.ONCE),
        (" Suite-Sequential ", ForkMode.SUITE_SEQUENTIAL),
        ("fork-per-suite", ForkMode.SUITE_SEQUENTIAL),
        (None, ForkMode.ONCE),
    ],
)
def test_parse_accepts_known_modes_and_aliases(raw: str | None, expected: ForkMode) -> None:
    assert ForkMode.parse(raw) is expected


def test_parse_unknown_mode_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        mode = ForkMode.parse("always")

    assert mode is ForkMode.ONCE
    assert [record.levelno for record in caplog.records] == [logging.WARNING]
