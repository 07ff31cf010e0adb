"""Tests for the suite authoring API."""

import sys

import pytest

from reactgtk.gest.dsl import (
    after_all,
    after_each,
    before_all,
    before_each,
    describe,
    expect,
    it,
)
from reactgtk.gest.errors import AssertionFailure


def test_describe_builds_nested_tree() -> None:
    """describe collects hooks, cases and child suites."""

    def inner() -> None:
        it("inner case", lambda: None)

    def body() -> None:
        before_all(lambda: None)
        before_each(lambda: None)
        after_each(lambda: None)
        after_all(lambda: None)
        it("first", lambda: None)
        it("second", lambda: None)
        describe("inner", inner)

    root = describe("root", body)

    assert root.kind == "suite"
    assert root.name == "root"
    assert [case.name for case in root.cases] == ["first", "second"]
    assert len(root.before_all) == 1
    assert len(root.before_each) == 1
    assert len(root.after_each) == 1
    assert len(root.after_all) == 1
    assert [child.name for child in root.children] == ["inner"]
    assert root.children[0].cases[0].name == "inner case"


def test_describe_records_caller_location() -> None:
    """Suites and cases record the line they were declared on."""
    cases_line = 0

    def body() -> None:
        nonlocal cases_line
        cases_line = _line() + 1
        it("located", lambda: None)

    root = describe("root", body)

    assert root.cases[0].line == cases_line
    assert root.cases[0].column == 9
    assert root.line > 0


def _line() -> int:
    return sys._getframe(1).f_lineno


def test_it_outside_describe() -> None:
    """Declaring a case outside describe is an error."""
    with pytest.raises(RuntimeError, match="inside describe"):
        it("orphan", lambda: None)


def test_expect_passing_matchers() -> None:
    """Matching expectations do not raise."""
    marker = object()
    expect(marker).to_be(marker)
    expect([1, 2]).to_equal([1, 2])
    expect(1).to_be_truthy()
    expect("").to_be_falsy()
    expect("gest").to_contain("es")
    expect(lambda: 1 / 0).to_raise(ZeroDivisionError)
    expect(1).not_.to_equal(2)


def test_expect_failure_carries_location() -> None:
    """A failing matcher raises AssertionFailure at the caller's position."""
    with pytest.raises(AssertionFailure) as exc_info:
        line = _line() + 1
        expect(1).to_equal(2)

    error = exc_info.value
    assert error.line == line
    assert error.column == 9
    assert error.message == "Expected: 2\nReceived: 1"


def test_expect_negated_failure() -> None:
    """Negated matchers fail when the plain matcher would pass."""
    with pytest.raises(AssertionFailure, match="Expected not"):
        expect(3).not_.to_equal(3)


def test_expect_to_raise_failure() -> None:
    """to_raise fails when nothing is raised."""
    with pytest.raises(AssertionFailure, match="ValueError to be raised"):
        expect(lambda: None).to_raise(ValueError)
