"""Action framework types and collaborator interfaces."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol


class ReadTreeResponse(Protocol):
    """A fetched source tree that can be written out to disk."""

    def dir(self, target_dir: Path) -> None:
        """Materialize the tree into *target_dir*."""
        ...


class UrlReader(Protocol):
    """Reads remote source trees (VCS hosts, archives, ...)."""

    def read_tree(self, url: str) -> ReadTreeResponse:
        ...


class ScmIntegration(Protocol):
    def resolve_url(self, *, url: str, base: str) -> str:
        """Resolve *url* relative to *base* on this integration's host."""
        ...


class ScmIntegrations(Protocol):
    def by_url(self, url: str) -> ScmIntegration | None:
        """Return the integration that serves *url*, if any."""
        ...


def _discard_output(name: str, value: Any) -> None:
    return None


@dataclass
class ActionContext:
    """Everything an action handler gets from the task runner."""

    input: dict[str, Any]
    workspace_path: Path
    create_temporary_directory: Callable[[], Path]
    base_url: str | None = None
    logger: logging.Logger | logging.LoggerAdapter = field(
        default_factory=lambda: logging.getLogger("treeplate.action")
    )
    output: Callable[[str, Any], None] = _discard_output


@dataclass(frozen=True)
class TemplateAction:
    """A named action and its handler."""

    id: str
    handler: Callable[[ActionContext], None]
    description: str = ""
