"""Resolve bundle artifact positions back to original source positions."""

import logging
import traceback
from pathlib import Path

from pydantic import ValidationError

from reactgtk.gest.errors import GestError, ResolveError
from reactgtk.gest.models.source_map import OriginalPosition, SourceMap
from reactgtk.gest.vlq import Base64VLQ

logger = logging.getLogger(__name__)

_PACKAGE_DIR = str(Path(__file__).parent)


class SourceMapReader:
    """Look up original positions in a parsed source map."""

    def __init__(self, source_map: SourceMap) -> None:
        """Initialize with a parsed source map."""
        self.map = source_map
        self.converter = Base64VLQ()

    def _source(self, index: int) -> str | None:
        if 0 <= index < len(self.map.sources):
            return self.map.sources[index]
        return None

    def get_original_position(
        self, out_line: int, out_column: int
    ) -> OriginalPosition | None:
        """Resolve a 1-based generated position.

        Segments are delta encoded: the generated column restarts at every
        generated line while the source, line and column fields accumulate
        across the whole map.

        Args:
            out_line: 1-based line in the bundle artifact
            out_column: 1-based column in the bundle artifact

        Returns:
            The original position, or None when the line is not mapped

        Raises:
            DecodeError: If a segment contains an invalid character

        """
        out_line -= 1
        out_column -= 1

        lines = [line.split(",") for line in self.map.mappings.split(";")]
        if out_line < 0 or len(lines) <= out_line:
            return None

        state = [0, 0, 0, 0, 0]

        for index, segments in enumerate(lines):
            state[0] = 0

            for segment in segments:
                if not segment:
                    continue

                fields = self.converter.decode(segment)
                previous_column = state[0]
                for i, delta in enumerate(fields[:5]):
                    state[i] += delta

                if len(fields) < 4 or index != out_line:
                    continue

                if previous_column < out_column <= state[0]:
                    return OriginalPosition(
                        file=self._source(state[1]),
                        line=state[2] + 1,
                        column=out_column + state[3] - state[0] + 1,
                    )

            if index == out_line:
                return OriginalPosition(
                    file=self._source(state[1]), line=state[2] + 1, column=1
                )

        return None


def load_source_map(path: str) -> SourceMap:
    """Read and parse a source map file.

    Raises:
        ResolveError: If the file is missing or not a valid source map

    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResolveError(f"Cannot read source map {path}: {e}") from e

    try:
        return SourceMap.model_validate_json(text)
    except ValidationError as e:
        raise ResolveError(f"Invalid source map {path}: {e}") from e


class UnitSourceMap:
    """Source map of one unit, parsed on first use."""

    def __init__(self, path: str) -> None:
        """Initialize with the map file path; nothing is read yet."""
        self.path = path
        self._reader: SourceMapReader | None = None
        self._loaded = False

    @property
    def reader(self) -> SourceMapReader | None:
        """Reader for the map, or None when the map cannot be loaded."""
        if not self._loaded:
            self._loaded = True
            try:
                self._reader = SourceMapReader(load_source_map(self.path))
            except ResolveError as e:
                logger.warning(str(e))
        return self._reader

    def resolve(self, line: int, column: int) -> OriginalPosition | None:
        """Resolve a bundle position, returning None instead of raising."""
        reader = self.reader
        if reader is None:
            return None
        try:
            return reader.get_original_position(line, column)
        except GestError as e:
            logger.warning(f"Cannot resolve {self.path}:{line}:{column}: {e}")
            return None


def map_traceback(
    error: BaseException, bundle_path: str, source_map: UnitSourceMap
) -> str:
    """Format ``error``'s traceback with bundle frames mapped to original sources.

    Frames inside the runner itself are left out.
    """
    lines = ["Traceback (most recent call last):"]

    for frame in traceback.extract_tb(error.__traceback__):
        if frame.filename.startswith(_PACKAGE_DIR):
            continue

        position = None
        if frame.filename == bundle_path and frame.lineno is not None:
            column = (frame.colno or 0) + 1
            position = source_map.resolve(frame.lineno, column)

        if position is not None:
            lines.append(f"  {position} in {frame.name}")
        else:
            lines.append(
                f'  File "{frame.filename}", line {frame.lineno}, in {frame.name}'
            )

    lines.append(traceback.format_exception_only(type(error), error)[-1].rstrip())
    return "\n".join(lines)
