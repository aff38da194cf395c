"""
Pydantic models for grpr configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ToolConfig(BaseModel):
    """External tool that runs inside every repository."""

    executable: str = Field(
        default="git",
        min_length=1,
        description="Executable looked up on PATH for every repository.",
    )
    default_args: list[str] = Field(
        default_factory=lambda: ["status"],
        description="Arguments used when grpr is invoked without any.",
    )

    model_config = {"extra": "forbid"}


class DiscoveryConfig(BaseModel):
    """Repository discovery configuration."""

    root: Path = Path(".")
    markers: list[str] = Field(
        default_factory=lambda: [".git"],
        description=(
            "Names of the metadata directories that mark a repository root. "
            "A directory holding any of them is a repository."
        ),
    )

    model_config = {"extra": "forbid"}

    @field_validator("markers")
    @classmethod
    def validate_markers(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one repository marker is required")
        for name in v:
            if not name or "/" in name or "\\" in name or name in (".", ".."):
                raise ValueError(f"Invalid marker name: '{name}'")
        return v


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = Field(default=0, ge=0)
    quiet: bool = False

    model_config = {"extra": "forbid"}


class ReportConfig(BaseModel):
    """Run report configuration."""

    file: Path | None = Field(
        default=None,
        description="If set, a JSON report of the run is written to this path.",
    )

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete application configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    tool: ToolConfig = Field(default_factory=ToolConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    model_config = {"extra": "forbid"}
