"""Outcome of running a hook chain, case or suite."""

from enum import Enum


class Outcome(str, Enum):
    """Result passed up the suite tree instead of a marker exception.

    Every failure is written to the unit's error output where it happens, so
    callers only decide whether to keep going.
    """

    PASSED = "passed"
    FAILED = "failed"
    # a lifecycle hook failed; the rest of the suite body is skipped
    ABORTED = "aborted"

    @property
    def failed(self) -> bool:
        """Whether this outcome is a failure."""
        return self is not Outcome.PASSED
