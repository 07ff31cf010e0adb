"""Authoring API used by built test artifacts to declare their suite tree.

A built artifact exposes its root suite as the module attribute ``default``::

    from reactgtk.gest.dsl import describe, expect, it

    def _body():
        it("adds", lambda: expect(1 + 1).to_equal(2))

    default = describe("math", _body)
"""

import inspect
import sys
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from reactgtk.gest.errors import AssertionFailure
from reactgtk.gest.models.test_tree import Case, Hook, Suite, TestCallback

_builders: ContextVar[tuple["_SuiteBuilder", ...]] = ContextVar(
    "gest_suite_builders", default=()
)


def _caller_location(depth: int) -> tuple[int, int]:
    """Return the 1-based line and column of the frame ``depth`` levels up."""
    frame = sys._getframe(depth + 1)
    info = inspect.getframeinfo(frame, context=0)
    column = 0
    if info.positions is not None and info.positions.col_offset is not None:
        column = info.positions.col_offset
    return info.lineno, column + 1


class _SuiteBuilder:
    def __init__(self, name: str, line: int, column: int) -> None:
        self.name = name
        self.line = line
        self.column = column
        self.hooks: dict[str, list[Hook]] = {
            "before_all": [],
            "before_each": [],
            "after_each": [],
            "after_all": [],
        }
        self.cases: list[Case] = []
        self.children: list[Suite] = []

    def build(self) -> Suite:
        return Suite(
            name=self.name,
            line=self.line,
            column=self.column,
            cases=self.cases,
            children=self.children,
            **self.hooks,
        )


def _current() -> _SuiteBuilder:
    stack = _builders.get()
    if not stack:
        raise RuntimeError("Hooks and test cases must be declared inside describe()")
    return stack[-1]


def describe(name: str, body: Callable[[], Any]) -> Suite:
    """Declare a suite; ``body`` declares its hooks, cases and child suites."""
    line, column = _caller_location(1)
    builder = _SuiteBuilder(name, line, column)

    token = _builders.set((*_builders.get(), builder))
    try:
        body()
    finally:
        _builders.reset(token)

    suite = builder.build()
    stack = _builders.get()
    if stack:
        stack[-1].children.append(suite)
    return suite


def it(name: str, callback: TestCallback) -> None:
    """Declare a test case in the current suite."""
    line, column = _caller_location(1)
    _current().cases.append(
        Case(name=name, callback=callback, line=line, column=column)
    )


def _add_hook(kind: str, callback: TestCallback) -> None:
    line, column = _caller_location(2)
    _current().hooks[kind].append(Hook(callback=callback, line=line, column=column))


def before_all(callback: TestCallback) -> None:
    """Run ``callback`` once before the suite's cases."""
    _add_hook("before_all", callback)


def before_each(callback: TestCallback) -> None:
    """Run ``callback`` before every case of the suite and its children."""
    _add_hook("before_each", callback)


def after_each(callback: TestCallback) -> None:
    """Run ``callback`` after every case of the suite and its children."""
    _add_hook("after_each", callback)


def after_all(callback: TestCallback) -> None:
    """Run ``callback`` once after the suite's cases and child suites."""
    _add_hook("after_all", callback)


class Expectation:
    """Matchers for one value; a failed matcher raises ``AssertionFailure``."""

    def __init__(self, actual: Any, negated: bool = False) -> None:
        """Initialize with the value under test."""
        self.actual = actual
        self.negated = negated

    @property
    def not_(self) -> "Expectation":
        """Negated matchers."""
        return Expectation(self.actual, not self.negated)

    def _assert(self, passed: bool, message: str) -> None:
        if passed == self.negated:
            line, column = _caller_location(2)
            prefix = "Expected not: " if self.negated else "Expected: "
            raise AssertionFailure(prefix + message, line, column)

    def to_be(self, expected: Any) -> None:
        """Identity comparison."""
        self._assert(
            self.actual is expected, f"{expected!r}\nReceived: {self.actual!r}"
        )

    def to_equal(self, expected: Any) -> None:
        """Equality comparison."""
        self._assert(
            self.actual == expected, f"{expected!r}\nReceived: {self.actual!r}"
        )

    def to_be_truthy(self) -> None:
        """Value is truthy."""
        self._assert(bool(self.actual), f"truthy value\nReceived: {self.actual!r}")

    def to_be_falsy(self) -> None:
        """Value is falsy."""
        self._assert(not self.actual, f"falsy value\nReceived: {self.actual!r}")

    def to_contain(self, item: Any) -> None:
        """Value contains ``item``."""
        self._assert(
            item in self.actual, f"{self.actual!r} to contain {item!r}"
        )

    def to_raise(self, error_type: type[BaseException] = Exception) -> None:
        """Calling the value raises ``error_type``."""
        try:
            self.actual()
        except error_type:
            raised = True
        else:
            raised = False
        self._assert(raised, f"{error_type.__name__} to be raised")


def expect(actual: Any) -> Expectation:
    """Start an expectation on ``actual``."""
    return Expectation(actual)
