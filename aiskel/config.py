"""ai-skeleton CLI configuration.

Centralised, typed configuration for the template materializer. Settings use
a Pydantic v2 model so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATE_URL = "https://github.com/richer421/ai_skeleton/archive/main.zip"
DEFAULT_VERSION = "1.0.0"
DEFAULT_MODULE_PREFIX = "github.com/user"

# Relative path prefixes never copied into a generated project.
DEFAULT_EXCLUDED_PATHS: tuple[str, ...] = (
    "cli",
    ".git",
    "backend/tmp",
    "backend/bin",
    "frontend/node_modules",
    "frontend/dist",
    "requirements",
    ".github",
    ".vscode",
    ".idea",
)

# Paths whose presence marks a directory as a checked-out scaffold root.
DEFAULT_ROOT_MARKERS: tuple[str, ...] = (
    "backend/go.mod",
    "frontend/package.json",
    "Makefile",
    "README.md",
)


class ScaffoldConfig(BaseModel):
    """Global configuration for project materialization.

    Instances are typically created once by the CLI entry point (from
    defaults, a JSON file or the environment) and then passed to the metadata
    collector and the renderer.
    """

    template_url: str = Field(default=DEFAULT_TEMPLATE_URL, min_length=1)
    mode: Literal["remote", "local"] = Field(
        default="remote",
        description="'remote' downloads the template archive, 'local' uses a checked-out scaffold",
    )
    default_version: str = Field(default=DEFAULT_VERSION, min_length=1)
    module_prefix: str = Field(
        default=DEFAULT_MODULE_PREFIX,
        description="Prefix used to derive a module path when none is given",
    )
    excluded_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_PATHS))
    root_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_ROOT_MARKERS))

    @field_validator("excluded_paths", "root_markers")
    @classmethod
    def _normalise_paths(cls, value: list[str]) -> list[str]:
        """Store relative paths in POSIX form without surrounding slashes."""
        cleaned = [p.replace("\\", "/").strip().strip("/") for p in value]
        return [p for p in cleaned if p]

    @field_validator("module_prefix")
    @classmethod
    def _strip_prefix(cls, value: str) -> str:
        return value.strip().rstrip("/")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def default_module(self, name: str) -> str:
        """Return the module path suggested for a project called *name*."""
        if not self.module_prefix:
            return name
        return f"{self.module_prefix}/{name}"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Parent directories are created.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``ScaffoldConfig`` instance.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            AISKEL_TEMPLATE_URL, AISKEL_MODE, AISKEL_DEFAULT_VERSION,
            AISKEL_MODULE_PREFIX, AISKEL_EXCLUDED_PATHS, AISKEL_ROOT_MARKERS.

        The two list variables are comma separated.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("AISKEL_TEMPLATE_URL"):
            kwargs["template_url"] = os.environ["AISKEL_TEMPLATE_URL"]
        if os.environ.get("AISKEL_MODE"):
            kwargs["mode"] = os.environ["AISKEL_MODE"].strip().lower()
        if os.environ.get("AISKEL_DEFAULT_VERSION"):
            kwargs["default_version"] = os.environ["AISKEL_DEFAULT_VERSION"]
        if "AISKEL_MODULE_PREFIX" in os.environ:
            kwargs["module_prefix"] = os.environ["AISKEL_MODULE_PREFIX"]
        if os.environ.get("AISKEL_EXCLUDED_PATHS"):
            kwargs["excluded_paths"] = _split_list(os.environ["AISKEL_EXCLUDED_PATHS"])
        if os.environ.get("AISKEL_ROOT_MARKERS"):
            kwargs["root_markers"] = _split_list(os.environ["AISKEL_ROOT_MARKERS"])
        return cls(**kwargs)


def _split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]
