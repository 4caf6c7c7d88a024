"""Suite and test selector entities."""

from __future__ import annotations

import re
from dataclasses import dataclass

EXACT_TEST_MARKER = "@"

_FIRST_WHITESPACE = re.compile(r"\s", re.DOTALL)


@dataclass(frozen=True)
class TestSelector:
    """A test name matched either exactly or as a substring."""

    __test__ = False

    name: str
    exact: bool

    @staticmethod
    def parse(raw: str | None) -> TestSelector | None:
        """Parse ``"@exact name"`` or ``"substring"``; blank input selects nothing."""
        if raw is None:
            return None
        text = raw.strip()
        if not text:
            return None
        if text.startswith(EXACT_TEST_MARKER):
            exact_name = text[len(EXACT_TEST_MARKER) :].strip()
            if not exact_name:
                return None
            return TestSelector(name=exact_name, exact=True)
        return TestSelector(name=text, exact=False)

    def to_arguments(self) -> tuple[str, str]:
        return ("-t" if self.exact else "-z", self.name)


@dataclass(frozen=True)
class SuiteSelector:
    """A suite name optionally followed by a test name."""

    suite: str
    test: str | None = None

    @staticmethod
    def parse(raw: str | None) -> SuiteSelector | None:
        """Split on the first whitespace: ``"HelloSuite hello there"`` -> suite + test."""
        if raw is None:
            return None
        text = raw.strip()
        if not text:
            return None
        parts = _FIRST_WHITESPACE.split(text, maxsplit=1)
        if len(parts) == 1:
            return SuiteSelector(suite=text)
        remainder = parts[1].strip()
        return SuiteSelector(suite=parts[0], test=remainder or None)

    @property
    def test_selector(self) -> TestSelector | None:
        return TestSelector.parse(self.test)

    def to_arguments(self) -> tuple[str, ...]:
        test_selector = self.test_selector
        if test_selector is None:
            return ("-s", self.suite)
        return ("-s", self.suite, *test_selector.to_arguments())
