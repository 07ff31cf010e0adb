"""Configuration model for gest.config files."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

DEFAULT_TEST_DIRECTORY = "./__tests__"
DEFAULT_PARALLEL = 4
DEFAULT_BUILDER = ["gest-build"]


class GestConfig(BaseModel):
    """Runner configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    test_directory: str = Field(
        default=DEFAULT_TEST_DIRECTORY,
        alias="testDirectory",
        description="Directory scanned for test files",
    )
    parallel: int = Field(
        default=DEFAULT_PARALLEL, ge=1, description="Number of logical runners"
    )
    setup: str | None = Field(
        default=None,
        validation_alias=AliasChoices("setup", "setupFile"),
        description="Setup file passed to every build",
    )
    builder: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BUILDER),
        min_length=1,
        description="Build command prefix",
    )


class ConfigFile(GestConfig):
    """Schema of an on-disk config file, where the core keys are mandatory."""

    test_directory: str = Field(..., alias="testDirectory")
    parallel: int = Field(..., ge=1)
