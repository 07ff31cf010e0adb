"""Discover test files and pair them with their setup files."""

import logging
import re
from collections.abc import Callable
from pathlib import Path

from reactgtk.gest import paths
from reactgtk.gest.models.test_unit import TestUnit

logger = logging.getLogger(__name__)

TEST_FILE_PATTERN = re.compile(r".*\.test\.(m|c)?(ts|js|tsx|jsx)$")
SETUP_FILE_PATTERN = re.compile(r".*\.setup\.(m|c)?js$")

_TEST_SUFFIX = re.compile(r"\.test\.(m|c)?(ts|js|tsx|jsx)$")
_SETUP_SUFFIX = re.compile(r"\.setup\.(m|c)?(ts|js|tsx|jsx)$")


async def list_entries(directory: str) -> list[str]:
    """Names of the entries in ``directory``."""
    return sorted(entry.name for entry in Path(directory).iterdir())


async def walk_files(directory: str, on_file: Callable[[str, str], None]) -> None:
    """Call ``on_file(root, name)`` for every file below ``directory``."""
    for name in await list_entries(directory):
        child = paths.join(directory, name)
        if Path(child).is_dir():
            await walk_files(child, on_file)
        else:
            on_file(directory, name)


async def discover_test_units(test_directory: str) -> list[TestUnit]:
    """Find test files below ``test_directory`` and attach their setup files.

    Args:
        test_directory: Directory to scan recursively

    Returns:
        One unit per test file, in walk order

    """
    units: list[TestUnit] = []
    setup_files: dict[tuple[str, str], str] = {}

    def on_file(root: str, name: str) -> None:
        if TEST_FILE_PATTERN.match(name):
            units.append(
                TestUnit(
                    directory=root,
                    filename=name,
                    basename=_TEST_SUFFIX.sub("", name),
                    test_file_path=paths.join(root, name),
                )
            )
        elif SETUP_FILE_PATTERN.match(name):
            basename = _SETUP_SUFFIX.sub("", name)
            setup_files[(root, basename)] = paths.join(root, name)

    await walk_files(test_directory, on_file)

    paired: list[TestUnit] = []
    for unit in units:
        setup_file = setup_files.get((unit.directory, unit.basename))
        paired.append(unit.model_copy(update={"setup_file_path": setup_file}))

    logger.info(f"Discovered {len(paired)} test files in {test_directory}")
    return paired
