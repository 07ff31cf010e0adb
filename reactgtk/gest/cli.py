"""CLI entry point for the gest test runner."""

import asyncio
import logging
import re
import sys

import typer

from reactgtk.gest.config import load_config
from reactgtk.gest.orchestrator import RunnerOptions, TestOrchestrator

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _compile(pattern: str | None, option: str) -> re.Pattern[str] | None:
    """Compile an optional regular expression given on the command line."""
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        typer.echo(f"Error: invalid {option} pattern {pattern!r}: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show skipped tests and every test case"
    ),
    test_name_pattern: str | None = typer.Option(
        None, "--testNamePattern", "-t", help="Only run tests matching this regex"
    ),
    test_path_pattern: str | None = typer.Option(
        None, "--testPathPattern", "-p", help="Only run test files matching this regex"
    ),
) -> None:
    """A simple test runner for bundled JavaScript test suites."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )

    options = RunnerOptions(
        verbose=verbose,
        test_name_pattern=_compile(test_name_pattern, "--testNamePattern"),
        test_path_pattern=_compile(test_path_pattern, "--testPathPattern"),
    )

    config = load_config()
    logger.info(
        f"Test directory: {config.test_directory}, parallel: {config.parallel}"
    )

    orchestrator = TestOrchestrator(config, options)

    try:
        state = asyncio.run(orchestrator.run_tests())
    except Exception as e:
        logger.exception("Test run failed")
        typer.secho(f"Error running tests: {e}", fg="red", err=True)
        raise typer.Exit(code=1)

    orchestrator.report(state)

    if not state.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
