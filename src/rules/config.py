from __future__ import annotations

from pathlib import Path
from typing import Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract.models import BaseClassRef

CONFIG_FILENAME = "dryck-nav.toml"

BackendName = Literal["static", "lsp"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class BaseClassConfig(BaseModel):
    """The foreign base class whose descendants expose dialect functions."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="Context", description="Simple name of the base class")
    path_marker: str = Field(
        default="appeldryck",
        description="Substring required in the path of the defining file",
    )
    root_base: str = Field(
        default="object",
        description="Universal root base skipped when reading class headers",
    )

    def to_ref(self) -> BaseClassRef:
        return BaseClassRef(
            name=self.name,
            path_marker=self.path_marker,
            root_base=self.root_base,
        )


class LanguageServerConfig(BaseModel):
    """External Python language server used by the ``lsp`` backend."""

    model_config = ConfigDict(extra="forbid")

    command: list[str] = Field(
        default_factory=lambda: ["pyright-langserver", "--stdio"],
        description="Command line that starts the server on stdio",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for a single request",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        if not v or not v[0].strip():
            msg = "language_server.command must name an executable"
            raise ValueError(msg)
        return v


class NavConfig(BaseModel):
    """Configuration for dialect navigation in one workspace."""

    model_config = ConfigDict(extra="forbid")

    extension: str = Field(
        default="dryck",
        description="File extension of dialect documents, without the dot",
    )
    backend: BackendName = Field(
        default="static",
        description="Foreign tooling used for symbol lookups",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns excluded from workspace searches",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    search_paths: list[str] = Field(
        default_factory=list,
        description="Extra module roots searched by the static backend",
    )
    log_level: LogLevel = Field(default="WARNING")
    base_class: BaseClassConfig = Field(default_factory=BaseClassConfig)
    language_server: LanguageServerConfig = Field(
        default_factory=LanguageServerConfig
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Reject extensions that would not form a plain filename suffix."""
        stripped = v.lstrip(".")
        if not stripped or "/" in stripped or "\\" in stripped:
            msg = f"Invalid extension {v!r}"
            raise ValueError(msg)
        return stripped

    def resolve_search_paths(self, root: Path) -> list[Path]:
        resolved: list[Path] = []
        for entry in self.search_paths:
            path = Path(entry).expanduser()
            resolved.append(path if path.is_absolute() else root / path)
        return resolved


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> NavConfig:
    """Load configuration from dryck-nav.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return NavConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return NavConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
