from __future__ import annotations

from pathlib import Path

import tomllib
from pydantic import BaseModel, ConfigDict, Field

from scan.ignore import (
    DEFAULT_ALLOWED_HIDDEN_DIRS,
    DEFAULT_SKIP_DIRS,
    DEFAULT_SKIP_FILES,
    IgnoreResolver,
)
from scan.search import DEFAULT_SEARCH_MAX_FILES

CONFIG_FILENAME = "codemap.toml"

DEFAULT_MAX_FILES = 2000


class IgnoreConfig(BaseModel):
    """Replacement tables for the built-in ignore defaults."""

    model_config = ConfigDict(extra="forbid")

    skip_dirs: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_SKIP_DIRS),
        description="Directory names that are always skipped",
    )
    allowed_hidden_dirs: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_ALLOWED_HIDDEN_DIRS),
        description="Dot-directories that are walked despite being hidden",
    )
    skip_files: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_SKIP_FILES),
        description="File names that are always skipped",
    )


class CodeMapConfig(BaseModel):
    """Configuration for codebase map generation."""

    model_config = ConfigDict(extra="forbid")

    max_files: int = Field(
        default=DEFAULT_MAX_FILES,
        ge=0,
        description="Maximum number of files mapped (0 = no limit)",
    )
    search_max_files: int = Field(
        default=DEFAULT_SEARCH_MAX_FILES,
        ge=0,
        description="Maximum number of files searched (0 = no limit)",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob-or-substring patterns for files to include (empty = all)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob-or-substring patterns for files to exclude",
    )
    format: str = Field(
        default="markdown",
        description="Default output format: json, markdown, md or summary",
    )
    compact: bool = Field(
        default=False,
        description="Hide child symbols in markdown output",
    )
    ignore: IgnoreConfig = Field(
        default_factory=IgnoreConfig,
        description="Ignore tables",
    )

    def build_resolver(self, root: Path) -> IgnoreResolver:
        return IgnoreResolver(
            root,
            skip_dirs=self.ignore.skip_dirs,
            allowed_hidden_dirs=self.ignore.allowed_hidden_dirs,
            skip_files=self.ignore.skip_files,
        )


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> CodeMapConfig:
    """Load configuration from codemap.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return CodeMapConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return CodeMapConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
