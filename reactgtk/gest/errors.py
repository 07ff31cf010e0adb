"""Error taxonomy for the gest test runner."""


class GestError(Exception):
    """Base class for all runner errors."""


class DecodeError(GestError, ValueError):
    """A VLQ segment contained a character outside the Base64 alphabet."""


class ResolveError(GestError):
    """A source map is missing or corrupt."""


class CommandError(GestError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        """Initialize with the failed command line and its stderr text."""
        super().__init__(stderr or f"Command failed: {command} (exit {returncode})")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class BuildError(GestError):
    """The external build step failed for a test unit."""


class LoadError(GestError):
    """A built artifact does not expose a valid test tree."""


class AssertionFailure(GestError):
    """Structured assertion failure raised by ``expect`` matchers."""

    def __init__(self, message: str, line: int, column: int) -> None:
        """Initialize with the failure message and the caller location."""
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

