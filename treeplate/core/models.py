"""Domain models for template fetch input and rendering context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TEMPLATE_FILE_EXTENSION = ".njk"


class FetchTemplateInput(BaseModel):
    """Input accepted by the ``fetch:template`` action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(..., description="Relative or absolute location of the template")
    target_path: str = Field(
        default="./",
        alias="targetPath",
        description="Target path within the working directory",
    )
    values: dict[str, Any] = Field(
        default_factory=dict, description="Values to pass on to the templating engine"
    )
    copy_without_render: list[str] | None = Field(
        default=None,
        alias="copyWithoutRender",
        description="Glob patterns of files and directories copied without rendering",
    )
    cookiecutter_compat: bool = Field(
        default=False,
        alias="cookiecutterCompat",
        description="Use {{ }} delimiters and the cookiecutter namespace",
    )
    template_file_extension: str | bool | None = Field(
        default=None,
        alias="templateFileExtension",
        description="Only render files with this extension and strip it",
    )

    @field_validator("copy_without_render", mode="before")
    @classmethod
    def _check_copy_without_render(cls, value: Any) -> Any:
        if value is None:
            return value
        if not isinstance(value, (list, tuple)):
            raise ValueError("copyWithoutRender must be an array")
        if not all(isinstance(item, str) for item in value):
            raise ValueError("copyWithoutRender must be an array of strings")
        return list(value)

    @field_validator("target_path", mode="before")
    @classmethod
    def _check_target_path(cls, value: Any) -> Any:
        if value is None:
            return "./"
        if not isinstance(value, str):
            raise ValueError("targetPath must be a string")
        return value

    def resolved_file_extension(self) -> str | None:
        """Return the effective template file extension, if any."""
        ext = self.template_file_extension
        if ext is True:
            return DEFAULT_TEMPLATE_FILE_EXTENSION
        if not ext:
            return None
        return ext if ext.startswith(".") else f".{ext}"


class RenderContext(BaseModel):
    """Values and options shared by every render in one run."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, Any] = Field(default_factory=dict)
    cookiecutter_compat: bool = False

    def namespace(self) -> dict[str, Any]:
        """Return the template namespace for this context."""
        if self.cookiecutter_compat:
            return {"cookiecutter": self.values}
        return dict(self.values)
