"""Buffered, styled terminal output."""

import typer

# background used for error headers
CUSTOM_BLACK = (27, 28, 38)


def style(
    text: str,
    fg: str | tuple[int, int, int] | None = None,
    bg: str | tuple[int, int, int] | None = None,
    bold: bool | None = None,
) -> str:
    """Wrap ``text`` in ANSI styling."""
    return typer.style(text, fg=fg, bg=bg, bold=bold)


def left_pad(text: str, width: int, char: str = " ") -> str:
    """Indent every line of ``text`` by ``width`` characters."""
    pad = char * width
    return pad + text.replace("\n", "\n" + pad)


class OutputBuffer:
    """Collects output until it is flushed or piped to another buffer."""

    def __init__(self) -> None:
        """Initialize an empty buffer."""
        self._chunks: list[str] = []

    def __bool__(self) -> bool:
        """Whether anything is buffered."""
        return bool(self._chunks)

    @property
    def text(self) -> str:
        """Buffered text."""
        return "\n".join(self._chunks)

    def print(self, *lines: str) -> None:
        """Buffer one or more lines."""
        self._chunks.extend(lines)

    def println(self, *lines: str) -> None:
        """Buffer a block of lines followed by a blank line."""
        self._chunks.extend(lines)
        self._chunks.append("")

    def pipe(self, target: "OutputBuffer") -> None:
        """Move the buffered content to the end of ``target``."""
        target._chunks.extend(self._chunks)
        self._chunks.clear()

    def flush(self) -> None:
        """Write the buffered content to stdout and clear the buffer."""
        if not self._chunks:
            return
        typer.echo(self.text)
        self._chunks.clear()
