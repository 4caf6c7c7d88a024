"""Argument building exports."""

from .argument_builder import build_arguments, suite_arguments
from .selectors import SuiteSelector, TestSelector

__all__ = [
    "SuiteSelector",
    "TestSelector",
    "build_arguments",
    "suite_arguments",
]
