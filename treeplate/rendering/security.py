"""Workspace boundary checks for rendered output paths."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath, PureWindowsPath

from ..core.errors import NotAllowedError

logger = logging.getLogger(__name__)


def is_contained(candidate: Path, root: Path) -> bool:
    """Return True when *candidate* resolves to *root* or a path below it."""
    resolved_root = root.resolve()
    resolved = candidate.resolve()
    return resolved == resolved_root or resolved_root in resolved.parents


def assert_contained(candidate: Path, root: Path, *, what: str = "Path") -> None:
    """Raise NotAllowedError unless *candidate* stays inside *root*.

    Both paths are resolved first, so ``..`` segments and symlinks are
    taken into account.
    """
    if not is_contained(candidate, root):
        logger.debug(f"Rejected {candidate} (root: {root})")
        raise NotAllowedError(
            f"{what} {str(candidate)!r} resolves outside the working directory {str(root)!r}"
        )


def resolve_safe_child_path(root: Path, relative: str | Path, *, what: str = "Path") -> Path:
    """Join *relative* onto *root*, check containment and return the result."""
    candidate = (root / relative).resolve()
    assert_contained(candidate, root, what=what)
    return candidate


def is_absolute_segment(segment: str) -> bool:
    """Return True for segments that would reset a path join."""
    return PurePosixPath(segment).is_absolute() or PureWindowsPath(segment).anchor != ""


def has_relative_parts(segment: str) -> bool:
    """Return True when a rendered segment contains ``.`` or ``..`` parts."""
    return any(part in (".", "..") for part in re.split(r"[\\/]", segment))
