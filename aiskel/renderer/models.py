"""Pydantic model for the project being materialized, and the render stages."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from aiskel.config import DEFAULT_MODULE_PREFIX, DEFAULT_VERSION


class ProjectMeta(BaseModel):
    """Identifiers substituted into every retained template file.

    ``name`` doubles as the destination directory name. ``version`` and
    ``module`` always carry a value once the model is constructed.
    """

    name: str = Field(..., description="Project name, also the destination directory")
    description: str = Field(default="", description="Optional free-text description")
    version: str = Field(default=DEFAULT_VERSION, description="Initial project version")
    module: str = Field(default="", description="Module path replacing the template's own")
    template_url: str | None = Field(
        default=None, description="Override of the default template archive URL"
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project name must not be empty")
        return value

    @field_validator("description", "version", "module")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("template_url")
    @classmethod
    def _blank_url_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="after")
    def _fill_defaults(self) -> "ProjectMeta":
        if not self.version:
            self.version = DEFAULT_VERSION
        if not self.module:
            self.module = f"{DEFAULT_MODULE_PREFIX}/{self.name}"
        return self


class RenderStage(str, Enum):
    IDLE = "idle"
    CHECK_DESTINATION = "check_destination"
    ACQUIRING = "acquiring"
    # Extracting the downloaded archive, or resolving the local scaffold root.
    EXTRACTING = "extracting"
    WALKING = "walking"
    DONE = "done"
    FAILED = "failed"
