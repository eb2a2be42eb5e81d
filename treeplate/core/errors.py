"""Error types raised while fetching and rendering template trees."""

from __future__ import annotations


class TreeplateError(Exception):
    """Base class for all treeplate failures."""


class InputError(TreeplateError, ValueError):
    """Raised when action input is structurally invalid."""


class NotAllowedError(TreeplateError):
    """Raised when a path would escape the working directory."""


class TemplateRenderError(TreeplateError):
    """Raised when a template string cannot be parsed or evaluated."""

    def __init__(
        self, message: str, *, template: str, path: str | None = None
    ) -> None:
        self.template = template
        self.path = path
        location = f" in {path!r}" if path else ""
        super().__init__(f"{message}{location} (template: {template!r})")
