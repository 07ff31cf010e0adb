"""Tests for the suite executor."""

import re
from collections.abc import Callable
from pathlib import Path

import pytest

from reactgtk.gest.errors import AssertionFailure
from reactgtk.gest.executor import SuiteExecutor, UnitOutput, make_path
from reactgtk.gest.models.outcome import Outcome
from reactgtk.gest.models.test_tree import Case, Hook, Suite
from reactgtk.gest.models.test_unit import TestUnitInfo


@pytest.fixture
def info(tmp_path: Path) -> TestUnitInfo:
    """Unit info whose source map does not exist."""
    bundle = tmp_path / "a.test.ts.bundled.py"
    return TestUnitInfo(
        source_file_path=str(tmp_path / "a.test.ts"),
        bundle_artifact_path=str(bundle),
        source_map_path=f"{bundle}.map",
    )


@pytest.fixture
def output() -> UnitOutput:
    """Empty unit output."""
    return UnitOutput()


def _record(calls: list[str], name: str) -> Callable[[], None]:
    def callback() -> None:
        calls.append(name)

    return callback


def _fail(message: str = "hook failed") -> Callable[[], None]:
    def callback() -> None:
        raise RuntimeError(message)

    return callback


def _hook(callback: Callable[[], object]) -> Hook:
    return Hook(callback=callback, line=1, column=1)


def _case(name: str, callback: Callable[[], object]) -> Case:
    return Case(name=name, callback=callback, line=2, column=1)


def test_make_path() -> None:
    """make_path quotes names and joins them with ' > '."""
    assert make_path(["Suite", "Inner", "case"]) == '"Suite" > "Inner" > "case"'


async def test_hook_inheritance_order(info: TestUnitInfo, output: UnitOutput) -> None:
    """Child suites run parent before_each first and parent after_each last."""
    calls: list[str] = []
    child = Suite(
        name="child",
        line=3,
        before_each=[_hook(_record(calls, "child before_each"))],
        after_each=[_hook(_record(calls, "child after_each"))],
        cases=[_case("c1", _record(calls, "c1"))],
    )
    root = Suite(
        name="root",
        line=1,
        before_all=[_hook(_record(calls, "root before_all"))],
        before_each=[_hook(_record(calls, "root before_each"))],
        after_each=[_hook(_record(calls, "root after_each"))],
        after_all=[_hook(_record(calls, "root after_all"))],
        cases=[_case("r1", _record(calls, "r1"))],
        children=[child],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.PASSED
    assert calls == [
        "root before_all",
        "root before_each",
        "r1",
        "root after_each",
        "root before_each",
        "child before_each",
        "c1",
        "child after_each",
        "root after_each",
        "root after_all",
    ]
    assert len(root.before_each) == 1
    assert len(child.before_each) == 1


async def test_before_all_failure_skips_suite(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """A before_all failure skips the suite but the ancestor after_all runs."""
    calls: list[str] = []
    failing = Suite(
        name="failing",
        line=2,
        before_all=[_hook(_fail())],
        after_all=[_hook(_record(calls, "failing after_all"))],
        cases=[_case("a", _record(calls, "a"))],
        children=[
            Suite(name="nested", line=3, cases=[_case("n", _record(calls, "n"))])
        ],
    )
    root = Suite(
        name="root",
        line=1,
        after_all=[_hook(_record(calls, "root after_all"))],
        children=[
            failing,
            Suite(name="sibling", line=4, cases=[_case("s", _record(calls, "s"))]),
        ],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["s", "root after_all"]
    assert output.err.text.count("An error occurred when running a lifecycle hook") == 1
    assert "hook failed" in output.err.text


async def test_before_each_failure_stops_remaining_cases(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """A before_each failure stops later cases but not sibling suites."""
    calls: list[str] = []
    attempts: list[int] = []

    def flaky_before_each() -> None:
        attempts.append(1)
        if len(attempts) == 2:
            raise RuntimeError("second setup failed")

    suite_a = Suite(
        name="A",
        line=2,
        before_each=[_hook(flaky_before_each)],
        after_all=[_hook(_record(calls, "A after_all"))],
        cases=[
            _case("a1", _record(calls, "a1")),
            _case("a2", _record(calls, "a2")),
            _case("a3", _record(calls, "a3")),
        ],
    )
    suite_b = Suite(name="B", line=3, cases=[_case("b1", _record(calls, "b1"))])
    root = Suite(name="root", line=1, children=[suite_a, suite_b])

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["a1", "A after_all", "b1"]
    assert "second setup failed" in output.err.text


async def test_after_each_runs_after_failing_case(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """after_each runs regardless of the case outcome."""
    calls: list[str] = []
    root = Suite(
        name="root",
        line=1,
        after_each=[_hook(_record(calls, "after_each"))],
        cases=[
            _case("bad", _fail("case failed")),
            _case("good", _record(calls, "good")),
        ],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["after_each", "good", "after_each"]


async def test_name_filter_runs_matching_case_only(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """Only cases whose display path matches the name pattern are executed."""
    calls: list[str] = []
    root = Suite(
        name="A",
        line=1,
        before_each=[_hook(_record(calls, "before_each"))],
        cases=[
            _case("a", _record(calls, "a")),
            _case("b", _record(calls, "b")),
            _case("c", _record(calls, "c")),
        ],
    )
    executor = SuiteExecutor(
        info, output, name_pattern=re.compile(re.escape('"A" > "b"'))
    )

    outcome = await executor.run(root)

    assert outcome is Outcome.PASSED
    assert calls == ["before_each", "b"]


async def test_name_filter_reports_skipped_cases_when_verbose(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """Skipped cases are listed in verbose mode."""
    root = Suite(name="A", line=1, cases=[_case("skipped", lambda: None)])
    executor = SuiteExecutor(
        info, output, name_pattern=re.compile("nothing"), verbose=True
    )

    outcome = await executor.run(root)

    assert outcome is Outcome.PASSED
    assert "[-]" in output.info.text
    assert "skipped" in output.info.text


async def test_passing_case_is_listed(info: TestUnitInfo, output: UnitOutput) -> None:
    """Passing cases are listed in the info output."""
    root = Suite(name="A", line=1, cases=[_case("works", lambda: None)])

    await SuiteExecutor(info, output).run(root)

    assert "[✓]" in output.info.text
    assert not output.err


async def test_assertion_failure_report(info: TestUnitInfo, output: UnitOutput) -> None:
    """Assertion failures show the message and link without a traceback."""

    def failing() -> None:
        raise AssertionFailure("Expected: 2\nReceived: 1", 7, 3)

    root = Suite(name="A", line=1, cases=[_case("compares", failing)])

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert "[✘]" in output.info.text
    assert "    Expected: 2\n    Received: 1" in output.err.text
    assert info.source_file_path in output.err.text
    assert "Traceback" not in output.err.text


async def test_unexpected_error_report(info: TestUnitInfo, output: UnitOutput) -> None:
    """Unexpected errors also show a traceback."""

    def failing() -> None:
        raise ValueError("kaboom")

    root = Suite(name="A", line=1, cases=[_case("explodes", failing)])

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert "    kaboom" in output.err.text
    assert "Traceback (most recent call last):" in output.err.text
    assert "ValueError: kaboom" in output.err.text


async def test_async_callbacks_are_awaited(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """Coroutine callbacks are awaited."""
    calls: list[str] = []

    async def setup() -> None:
        calls.append("setup")

    async def case() -> None:
        calls.append("case")

    async def failing() -> None:
        raise RuntimeError("async failure")

    root = Suite(
        name="A",
        line=1,
        before_each=[_hook(setup)],
        cases=[_case("ok", case), _case("bad", failing)],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["setup", "case", "setup"]
    assert "async failure" in output.err.text


async def test_after_all_failure_fails_suite(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """An after_all failure is reported and fails the suite."""
    root = Suite(
        name="A",
        line=1,
        after_all=[_hook(_fail("teardown failed"))],
        cases=[_case("ok", lambda: None)],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert "teardown failed" in output.err.text


async def test_system_exit_in_case_is_reported(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """sys.exit() inside a case fails that case only."""
    calls: list[str] = []

    def exits() -> None:
        raise SystemExit(0)

    root = Suite(
        name="A",
        line=1,
        cases=[_case("exits", exits), _case("after", _record(calls, "after"))],
        after_all=[_hook(_record(calls, "after_all"))],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["after", "after_all"]
    assert "SystemExit: 0" in output.err.text


async def test_keyboard_interrupt_in_hook_is_reported(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """A hook raising KeyboardInterrupt is reported as a hook failure."""
    calls: list[str] = []

    def interrupt() -> None:
        raise KeyboardInterrupt

    root = Suite(
        name="A",
        line=1,
        before_all=[_hook(interrupt)],
        cases=[_case("never", _record(calls, "never"))],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.ABORTED
    assert calls == []
    assert "An error occurred when running a lifecycle hook:" in output.err.text
    assert "KeyboardInterrupt" in output.err.text


async def test_undecodable_source_map_keeps_running(
    info: TestUnitInfo, output: UnitOutput
) -> None:
    """A map file that is not UTF-8 only loses the location of the failure."""
    Path(info.source_map_path).write_bytes(b"\xff\xfe\x00garbage")
    calls: list[str] = []

    root = Suite(
        name="A",
        line=1,
        cases=[
            _case("bad", _fail("boom")),
            _case("good", _record(calls, "good")),
        ],
        after_all=[_hook(_record(calls, "after_all"))],
    )

    outcome = await SuiteExecutor(info, output).run(root)

    assert outcome is Outcome.FAILED
    assert calls == ["good", "after_all"]
    assert "    boom" in output.err.text
    assert info.source_file_path in output.err.text
