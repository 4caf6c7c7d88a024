"""Test discovery exports."""

from .class_discovery import discover_test_classes, qualified_class_name
from .suite_classifier import ClassificationError, Classifier, SuiteClassifier

__all__ = [
    "discover_test_classes",
    "qualified_class_name",
    "ClassificationError",
    "Classifier",
    "SuiteClassifier",
]
