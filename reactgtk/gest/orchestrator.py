"""Drain a shared backlog of test units with several cooperative runners."""

import asyncio
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from reactgtk.gest.artifact import delete_artifacts, load_test_tree
from reactgtk.gest.builder import build_test_file
from reactgtk.gest.discovery import discover_test_units
from reactgtk.gest.executor import SuiteExecutor, UnitOutput, error_message
from reactgtk.gest.models.config import GestConfig
from reactgtk.gest.models.test_unit import TestUnit
from reactgtk.gest.output import OutputBuffer, style
from reactgtk.gest.paths import display_path

logger = logging.getLogger(__name__)


class RunnerOptions(BaseModel):
    """Command line options shared by every runner."""

    model_config = ConfigDict(frozen=True)

    verbose: bool = Field(default=False, description="Report skipped items")
    test_name_pattern: re.Pattern[str] | None = Field(
        default=None, description="Only run cases whose display path matches"
    )
    test_path_pattern: re.Pattern[str] | None = Field(
        default=None, description="Only run test files whose path matches"
    )


class Backlog:
    """Test units waiting to be processed; each unit is taken exactly once."""

    def __init__(self, units: Iterable[TestUnit]) -> None:
        """Initialize with the discovered units."""
        self._units = list(units)

    def __len__(self) -> int:
        """Number of units left."""
        return len(self._units)

    def take(self) -> TestUnit | None:
        """Remove and return the next unit, or None when the backlog is empty."""
        if not self._units:
            return None
        return self._units.pop()


class RunState:
    """Run-wide result shared by all runners."""

    def __init__(self) -> None:
        """Initialize a passing run."""
        self.success = True
        self.error_outputs: list[OutputBuffer] = []

    def fail(self) -> None:
        """Mark the run as failed; a failed run never passes again."""
        self.success = False


class TestRunner:
    """One logical runner pulling units from the shared backlog."""

    __test__ = False

    def __init__(
        self,
        backlog: Backlog,
        state: RunState,
        config: GestConfig,
        options: RunnerOptions,
        cwd: Path | None = None,
    ) -> None:
        """Initialize a runner bound to the shared backlog and run state."""
        self.backlog = backlog
        self.state = state
        self.config = config
        self.options = options
        self.cwd = cwd or Path.cwd()
        self.main_output = OutputBuffer()

    async def start(self) -> None:
        """Process units until the backlog is empty."""
        while await self.next_unit():
            pass

    async def next_unit(self) -> bool:
        """Take and process one unit.

        Returns:
            False when the backlog was already empty

        """
        unit = self.backlog.take()
        if unit is None:
            return False

        try:
            await self.process(unit)
        except Exception as e:
            logger.debug(f"Failed to start {unit.test_file_path}", exc_info=e)
            self.state.fail()
            self.main_output.println(
                style("Failed to start a test:", fg="red"),
                f'"{unit.test_file_path}"',
                error_message(e),
            )
        finally:
            self.main_output.flush()

        return True

    def file_matches(self, path: str) -> bool:
        """Whether the cwd-relative ``path`` passes the test path filter."""
        pattern = self.options.test_path_pattern
        return pattern is None or pattern.search(path) is not None

    async def process(self, unit: TestUnit) -> None:
        """Build, load, execute and clean up one unit.

        Raises:
            BuildError: If the build step fails
            LoadError: If the artifact is not a test

        """
        relative_path = display_path(unit.test_file_path, self.cwd)

        if not self.file_matches(relative_path.removeprefix("./")):
            if self.options.verbose:
                self.main_output.print(
                    f"  [-] {style(relative_path, fg='yellow', bold=True)} "
                    + style("SKIPPED", fg="white", bg="bright_yellow", bold=True)
                )
            return

        info = unit.info()
        await build_test_file(
            self.config.builder,
            unit.test_file_path,
            info.bundle_artifact_path,
            main_setup=self.config.setup,
            file_setup=unit.setup_file_path,
        )

        output = UnitOutput()
        try:
            root = load_test_tree(info.bundle_artifact_path)
            self.state.error_outputs.append(output.err)
            executor = SuiteExecutor(
                info,
                output,
                name_pattern=self.options.test_name_pattern,
                verbose=self.options.verbose,
            )
            outcome = await executor.run(root)
        finally:
            await delete_artifacts(info)

        if outcome.failed:
            self.state.fail()
            self.main_output.print(
                f"[✘] {style(relative_path, fg='red', bold=True)} "
                + style("FAILED", fg="white", bg="bright_red", bold=True)
            )
        else:
            self.main_output.print(
                f"[✓] {style(relative_path, fg='green', bold=True)} "
                + style("PASSED", fg="white", bg="bright_green", bold=True)
            )

        if self.options.verbose:
            output.info.pipe(self.main_output)


class TestOrchestrator:
    """Discovers test units and runs them on ``config.parallel`` runners."""

    __test__ = False

    def __init__(
        self,
        config: GestConfig,
        options: RunnerOptions | None = None,
        cwd: Path | None = None,
    ) -> None:
        """Initialize with the loaded config and command line options."""
        self.config = config
        self.options = options or RunnerOptions()
        self.cwd = cwd or Path.cwd()

    async def run_tests(self) -> RunState:
        """Discover and run every test unit in the configured directory."""
        test_directory = self.config.test_directory
        if not Path(test_directory).is_absolute():
            test_directory = str(self.cwd / test_directory)

        units = await discover_test_units(test_directory)
        return await self.run(units)

    async def run(self, units: Iterable[TestUnit]) -> RunState:
        """Run ``units`` with concurrent runners sharing one backlog."""
        backlog = Backlog(units)
        state = RunState()
        logger.info(
            f"Running {len(backlog)} test files on {self.config.parallel} runners"
        )

        runners = [
            TestRunner(backlog, state, self.config, self.options, self.cwd)
            for _ in range(self.config.parallel)
        ]
        await asyncio.gather(*(runner.start() for runner in runners))

        return state

    def report(self, state: RunState) -> None:
        """Print the collected error reports and the final verdict."""
        if state.success:
            verdict = style("All tests have passed.", fg="green")
        else:
            verdict = style("Tests have failed.", fg="red")
            summary = OutputBuffer()
            summary.print("")
            for err in state.error_outputs:
                err.pipe(summary)
            summary.flush()

        final = OutputBuffer()
        final.print("", verdict)
        final.flush()
