"""Data models for test trees, units, source maps and configuration."""

from reactgtk.gest.models.config import GestConfig
from reactgtk.gest.models.outcome import Outcome
from reactgtk.gest.models.source_map import OriginalPosition, SourceMap
from reactgtk.gest.models.test_tree import Case, Hook, Location, Suite
from reactgtk.gest.models.test_unit import TestUnit, TestUnitInfo

__all__ = [
    "Case",
    "GestConfig",
    "Hook",
    "Location",
    "OriginalPosition",
    "Outcome",
    "SourceMap",
    "Suite",
    "TestUnit",
    "TestUnitInfo",
]
