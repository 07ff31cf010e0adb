"""Invoke the external build step that bundles a test file."""

import logging
from collections.abc import Sequence

from reactgtk.gest.command import Command
from reactgtk.gest.errors import BuildError, CommandError

logger = logging.getLogger(__name__)


async def build_test_file(
    builder: Sequence[str],
    input_path: str,
    output_path: str,
    main_setup: str | None = None,
    file_setup: str | None = None,
) -> None:
    """Bundle ``input_path`` into ``output_path`` and ``output_path + ".map"``.

    Args:
        builder: Build command prefix, e.g. ``["gest-build"]``
        input_path: Test file to bundle
        output_path: Artifact to produce
        main_setup: Setup file configured for every test unit
        file_setup: Setup file paired with this test file

    Raises:
        BuildError: If the build command cannot be spawned or exits non-zero

    """
    args = [*builder[1:], input_path, output_path]
    if main_setup:
        args.append(main_setup)
    if file_setup:
        args.append(file_setup)

    command = Command(builder[0], *args)
    logger.info(f"Building {input_path}")

    try:
        await command.run()
    except CommandError as e:
        raise BuildError(f"Build failed for {input_path}: {e}") from e
    except OSError as e:
        raise BuildError(f"Cannot run build command {command}: {e}") from e
