"""Model for source map files emitted by the build step."""

from pydantic import BaseModel, ConfigDict, Field


class SourceMap(BaseModel):
    """Parsed version 3 source map."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: int = Field(..., description="Source map format version")
    sources: list[str] = Field(default_factory=list, description="Original files")
    sources_content: list[str | None] = Field(
        default_factory=list,
        alias="sourcesContent",
        description="Inlined original file contents",
    )
    mappings: str = Field(..., description="Base64 VLQ encoded mappings")
    names: list[str] = Field(default_factory=list, description="Symbol names")


class OriginalPosition(BaseModel):
    """A 1-based position in an original source file."""

    model_config = ConfigDict(frozen=True)

    file: str | None = Field(..., description="Original source file")
    line: int = Field(..., description="1-based line")
    column: int = Field(..., description="1-based column")

    def __str__(self) -> str:
        """Render as ``file:line:column``."""
        return f"{self.file}:{self.line}:{self.column}"
