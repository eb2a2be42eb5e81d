"""Matching of template paths against copyWithoutRender patterns."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Iterable

import pathspec

logger = logging.getLogger(__name__)

DEFAULT_PATTERN_DIALECT = "gitwildmatch"


def _anchor(pattern: str) -> str:
    negated = pattern.startswith("!")
    body = pattern[1:] if negated else pattern
    if not body.startswith("/"):
        body = f"/{body}"
    return f"!{body}" if negated else body


class CopyWithoutRenderMatcher:
    """Decides whether a template path is copied verbatim.

    Patterns are evaluated relative to the root of the staged template tree.
    A path matches when any pattern matches the path itself or one of its
    ancestor directories, so listing a directory covers its whole subtree.

    Args:
        patterns: Glob patterns, in the given dialect
        dialect: Pattern dialect name understood by ``pathspec``
        anchored: Anchor every pattern at the tree root
    """

    def __init__(
        self,
        patterns: Iterable[str] = (),
        *,
        dialect: str = DEFAULT_PATTERN_DIALECT,
        anchored: bool = True,
    ) -> None:
        self.patterns = [p for p in patterns if p.strip()]
        lines = [_anchor(p) for p in self.patterns] if anchored else self.patterns
        self._spec = pathspec.PathSpec.from_lines(dialect, lines)
        logger.debug(f"copyWithoutRender patterns: {lines}")

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, relative_path: str | PurePosixPath, *, is_dir: bool = False) -> bool:
        """Return True when *relative_path* or an ancestor is matched."""
        if not self.patterns:
            return False

        path = PurePosixPath(relative_path)
        if self._matches_one(path.as_posix(), is_dir=is_dir):
            return True
        return any(
            self._matches_one(parent.as_posix(), is_dir=True)
            for parent in path.parents
            if parent != PurePosixPath(".")
        )

    def _matches_one(self, posix_path: str, *, is_dir: bool) -> bool:
        if self._spec.match_file(posix_path):
            return True
        return is_dir and self._spec.match_file(f"{posix_path}/")


def matches(relative_path: str, patterns: Iterable[str]) -> bool:
    """Return True when *relative_path* falls under one of *patterns*."""
    return CopyWithoutRenderMatcher(patterns).matches(relative_path)
