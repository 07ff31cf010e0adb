"""Run external commands synchronously or on the event loop."""

import asyncio
import logging
import shlex
import subprocess

from reactgtk.gest.errors import CommandError

logger = logging.getLogger(__name__)


class Command:
    """An external command with its arguments."""

    def __init__(self, command: str, *options: str) -> None:
        """Initialize with the executable and its arguments."""
        self.command = command
        self.options = list(options)

    @property
    def argv(self) -> list[str]:
        """Full argument vector."""
        return [self.command, *self.options]

    def __str__(self) -> str:
        """Shell-quoted command line, for logs and error messages."""
        return shlex.join(self.argv)

    def run_sync(self) -> str:
        """Run the command, blocking until it exits.

        Returns:
            Combined stdout text

        Raises:
            CommandError: If the command exits with a non-zero status

        """
        logger.debug(f"Running: {self}")
        try:
            result = subprocess.run(
                self.argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise CommandError(str(self), e.returncode, e.stderr or "") from e
        return result.stdout

    async def run(self) -> str:
        """Spawn the command and wait for it without blocking the loop.

        Returns:
            Stdout text

        Raises:
            CommandError: If the command exits with a non-zero status

        """
        logger.debug(f"Spawning: {self}")
        process = await asyncio.create_subprocess_exec(
            *self.argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip()
            logger.debug(f"Command exited with {process.returncode}: {error_msg}")
            raise CommandError(str(self), process.returncode or 1, error_msg)

        return stdout.decode(errors="replace")
