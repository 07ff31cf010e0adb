"""Run a suite tree: hooks, cases and child suites, depth first."""

import asyncio
import inspect
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from reactgtk.gest.errors import AssertionFailure
from reactgtk.gest.models.outcome import Outcome
from reactgtk.gest.models.test_tree import Case, Hook, Suite, TestCallback
from reactgtk.gest.models.test_unit import TestUnitInfo
from reactgtk.gest.output import CUSTOM_BLACK, OutputBuffer, left_pad, style
from reactgtk.gest.source_map import UnitSourceMap, map_traceback

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " > "


@dataclass
class UnitOutput:
    """Per-unit output buffers, merged into the main output by the runner."""

    err: OutputBuffer = field(default_factory=OutputBuffer)
    info: OutputBuffer = field(default_factory=OutputBuffer)


def make_path(names: Sequence[str]) -> str:
    """Display path of a suite or case, e.g. ``"Suite" > "case"``."""
    return PATH_SEPARATOR.join(f'"{name}"' for name in names)


def _styled_path(names: Sequence[str]) -> str:
    return style(PATH_SEPARATOR, fg="white", bold=True).join(
        f'"{name}"' for name in names
    )


def error_message(error: BaseException) -> str:
    """Human readable message of ``error``."""
    if not isinstance(error, Exception):
        name = type(error).__name__
        return f"{name}: {error}" if str(error) else name
    return str(error) or type(error).__name__


class SuiteExecutor:
    """Executes the suite tree of one test unit."""

    def __init__(
        self,
        info: TestUnitInfo,
        output: UnitOutput,
        name_pattern: re.Pattern[str] | None = None,
        verbose: bool = False,
        source_map: UnitSourceMap | None = None,
    ) -> None:
        """Initialize the executor for one unit.

        Args:
            info: Source and artifact paths of the unit
            output: Buffers receiving the unit's report
            name_pattern: Only cases whose display path matches are run
            verbose: Report skipped cases
            source_map: Map used to resolve failure locations, read lazily

        """
        self.info = info
        self.output = output
        self.name_pattern = name_pattern
        self.verbose = verbose
        self.source_map = source_map or UnitSourceMap(info.source_map_path)

    async def run(self, root: Suite) -> Outcome:
        """Run the tree rooted at ``root``."""
        return await self.run_suite(root, (), (), ())

    async def run_suite(
        self,
        suite: Suite,
        parents: tuple[str, ...],
        inherited_before_each: tuple[Hook, ...],
        inherited_after_each: tuple[Hook, ...],
    ) -> Outcome:
        """Run one suite, extending the hook chains inherited from its parents.

        A ``before_all`` failure skips the whole suite, ``after_all`` included.
        A ``before_each``/``after_each`` failure stops the suite's remaining
        cases; child suites and ``after_all`` still run.
        """
        path = (*parents, suite.name)
        before_each = (*inherited_before_each, *suite.before_each)
        after_each = (*suite.after_each, *inherited_after_each)

        try:
            if await self.run_hooks(suite.before_all) is Outcome.ABORTED:
                return Outcome.ABORTED

            passed = True

            for case in suite.cases:
                outcome = await self._run_case_with_hooks(
                    case, path, before_each, after_each
                )
                if outcome is Outcome.ABORTED:
                    passed = False
                    break
                passed = passed and not outcome.failed

            for child in suite.children:
                outcome = await self.run_suite(child, path, before_each, after_each)
                passed = passed and not outcome.failed

            if await self.run_hooks(suite.after_all) is Outcome.ABORTED:
                passed = False
        except Exception as e:
            logger.debug(f"Suite {make_path(path)} raised", exc_info=e)
            self.output.err.println(
                style(_styled_path(path), fg="green", bold=True),
                style("Test failed due to an error:", fg="red"),
                style(left_pad(error_message(e), 4), fg=(180, 180, 180)),
            )
            return Outcome.FAILED

        return Outcome.PASSED if passed else Outcome.FAILED

    async def _run_case_with_hooks(
        self,
        case: Case,
        path: tuple[str, ...],
        before_each: Sequence[Hook],
        after_each: Sequence[Hook],
    ) -> Outcome:
        case_path = (*path, case.name)
        if not self.name_matches(case_path):
            if self.verbose:
                self.output.info.print(
                    f"    [-] {style(_styled_path(case_path), fg='yellow')}"
                )
            return Outcome.PASSED

        if await self.run_hooks(before_each) is Outcome.ABORTED:
            return Outcome.ABORTED

        outcome = await self.run_case(case, path)

        if await self.run_hooks(after_each) is Outcome.ABORTED:
            return Outcome.ABORTED

        return outcome

    def name_matches(self, names: Sequence[str]) -> bool:
        """Whether the display path of ``names`` passes the name filter."""
        if self.name_pattern is None:
            return True
        return self.name_pattern.search(make_path(names)) is not None

    async def run_hooks(self, hooks: Sequence[Hook]) -> Outcome:
        """Run ``hooks`` in order, stopping at the first failure."""
        for hook in hooks:
            error = await _invoke(hook.callback)
            if error is not None:
                self.output.err.println(
                    style(
                        "An error occurred when running a lifecycle hook:",
                        fg="red",
                        bg=CUSTOM_BLACK,
                        bold=True,
                    ),
                    error_message(error),
                    style(self.link(hook.line, hook.column), fg="white"),
                )
                return Outcome.ABORTED
        return Outcome.PASSED

    async def run_case(self, case: Case, path: tuple[str, ...]) -> Outcome:
        """Run a single case and report its result."""
        display = _styled_path((*path, case.name))
        error = await _invoke(case.callback)

        if error is None:
            self.output.info.print(f"    [✓] {style(display, fg='green')}")
            return Outcome.PASSED

        self.output.info.print(f"    [✘] {style(display, fg='bright_red')}")
        header = style(display, fg="red", bg=CUSTOM_BLACK, bold=True)

        if isinstance(error, AssertionFailure):
            self.output.err.println(
                header,
                left_pad(error.message, 4),
                style(self.link(error.line, error.column), fg="white"),
            )
        else:
            stack = map_traceback(
                error, self.info.bundle_artifact_path, self.source_map
            )
            self.output.err.println(
                header,
                left_pad(error_message(error), 4),
                left_pad(stack, 6),
                style(self.link(case.line, case.column), fg="white"),
            )

        return Outcome.FAILED

    def link(self, line: int, column: int) -> str:
        """``source:line:column`` for a bundle position, or just the source file."""
        position = self.source_map.resolve(line, column)
        if position is None:
            return self.info.source_file_path
        return f"{self.info.source_file_path}:{position.line}:{position.column}"


async def _invoke(callback: TestCallback) -> BaseException | None:
    """Call ``callback``, awaiting it when it returns an awaitable.

    Anything the callback raises is returned, including ``SystemExit`` and
    ``KeyboardInterrupt``; only task cancellation propagates.
    """
    try:
        result = callback()
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except BaseException as e:
        return e
    return None
