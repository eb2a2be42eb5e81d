"""Recursive copy of a staged template tree into its destination."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterable

from ..core.errors import NotAllowedError, TemplateRenderError
from ..core.models import RenderContext
from . import io
from .engine import TemplateRenderer
from .matcher import CopyWithoutRenderMatcher
from .security import assert_contained, has_relative_parts, is_absolute_segment

logger = logging.getLogger(__name__)


class TreeCopier:
    """Copies a template tree, rendering names and contents on the way.

    Args:
        renderer: Renderer bound to the run's values
        matcher: Decides which entries are copied without rendering
        template_file_extension: When set, only files with this extension
            have their content rendered, and the extension is stripped
        file_mode: Permission bits for rendered files (default: keep source)
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        matcher: CopyWithoutRenderMatcher,
        *,
        template_file_extension: str | None = None,
        file_mode: int | None = None,
    ) -> None:
        self.renderer = renderer
        self.matcher = matcher
        self.template_file_extension = template_file_extension
        self.file_mode = file_mode

    def copy(
        self, source_dir: Path, dest_dir: Path, *, workspace_root: Path | None = None
    ) -> list[Path]:
        """Copy *source_dir* into *dest_dir*.

        Args:
            source_dir: Root of the staged template tree
            dest_dir: Destination directory
            workspace_root: Boundary *dest_dir* must stay in (default: *dest_dir*)

        Returns:
            Destination paths of every file and directory created
        """
        assert_contained(dest_dir, workspace_root or dest_dir, what="Target path")
        if not source_dir.is_dir():
            raise NotADirectoryError(f"Template directory not found: {source_dir}")

        dest_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Copying template tree {source_dir} → {dest_dir}")

        created: list[Path] = []
        self._copy_directory(source_dir, PurePosixPath(), dest_dir, dest_dir, created)
        logger.info(f"Processed {len(created)} entries into {dest_dir}")
        return created

    def _copy_directory(
        self,
        source: Path,
        rel_dir: PurePosixPath,
        dest_parent: Path,
        dest_root: Path,
        created: list[Path],
    ) -> None:
        for entry in sorted(source.iterdir(), key=lambda p: p.name):
            rel = rel_dir / entry.name
            is_link = entry.is_symlink()
            is_dir = entry.is_dir() and not is_link
            verbatim = self.matcher.matches(rel, is_dir=is_dir)
            render_contents = (
                not (verbatim or is_dir or is_link) and self._renders_contents(entry.name)
            )

            name = entry.name if verbatim else self._render_segment(entry.name, rel)
            if render_contents and self.template_file_extension:
                name = self._strip_extension(name, rel)
            target = self._target_path(dest_parent, name, dest_root, rel)

            if is_link:
                self._copy_symlink(entry, target, rel)
            elif is_dir:
                target.mkdir(parents=True, exist_ok=True)
                logger.debug(f"Created directory {rel} → {target}")
                created.append(target)
                self._copy_directory(entry, rel, target, dest_root, created)
                continue
            elif render_contents:
                self._render_file(entry, target, rel)
            else:
                logger.debug(f"Copying {rel} without rendering")
                io.copy_verbatim(entry, target)
            created.append(target)

    def _renders_contents(self, name: str) -> bool:
        if self.template_file_extension is None:
            return True
        return name.endswith(self.template_file_extension)

    def _strip_extension(self, name: str, rel: PurePosixPath) -> str:
        ext = self.template_file_extension or ""
        if name.endswith(ext):
            name = name[: -len(ext)]
        if not name:
            raise TemplateRenderError(
                "File name is empty once the template extension is removed",
                template=rel.name,
                path=str(rel),
            )
        return name

    def _render_segment(self, segment: str, rel: PurePosixPath) -> str:
        rendered = self.renderer.render_string(segment, path=str(rel))
        if not rendered.strip():
            raise TemplateRenderError(
                "Path segment rendered to an empty name", template=segment, path=str(rel)
            )
        return rendered

    def _target_path(
        self, dest_parent: Path, name: str, dest_root: Path, rel: PurePosixPath
    ) -> Path:
        if is_absolute_segment(name):
            raise NotAllowedError(
                f"Template path {str(rel)!r} rendered to an absolute path {name!r}"
            )
        if has_relative_parts(name):
            raise NotAllowedError(
                f"Template path {str(rel)!r} rendered {name!r}, which contains '.' or '..' parts"
            )
        target = dest_parent / name
        assert_contained(target, dest_root, what=f"Rendered path for {str(rel)!r}")
        return target

    def _render_file(self, source: Path, target: Path, rel: PurePosixPath) -> None:
        text = io.read_template_text(source)
        if text is None:
            logger.debug(f"Copying binary file {rel} without rendering")
            io.copy_verbatim(source, target)
            return

        rendered = self.renderer.render_string(text, path=str(rel))
        mode = self.file_mode if self.file_mode is not None else io.file_mode(source)
        io.atomic_write_text(target, rendered, mode=mode)
        logger.debug(f"Rendered {rel} → {target}")

    def _copy_symlink(self, source: Path, target: Path, rel: PurePosixPath) -> None:
        io.ensure_parent(target)
        if target.is_symlink() or target.exists():
            target.unlink()
        os.symlink(os.readlink(source), target)
        logger.debug(f"Recreated symlink {rel} → {target}")


def copy_templated_contents(
    source_dir: Path,
    dest_dir: Path,
    context: RenderContext,
    copy_without_render: Iterable[str] = (),
    *,
    workspace_root: Path | None = None,
    template_file_extension: str | None = None,
    file_mode: int | None = None,
) -> list[Path]:
    """Copy a staged template tree into *dest_dir*, rendering as it goes.

    Args:
        source_dir: Root of the staged template tree
        dest_dir: Destination directory
        context: Values and options for rendering
        copy_without_render: Patterns of entries copied verbatim
        workspace_root: Boundary *dest_dir* must stay in
        template_file_extension: Only render contents of files with this extension
        file_mode: Permission bits for rendered files (default: keep source)

    Returns:
        Destination paths of every file and directory created
    """
    copier = TreeCopier(
        TemplateRenderer(context),
        CopyWithoutRenderMatcher(copy_without_render),
        template_file_extension=template_file_extension,
        file_mode=file_mode,
    )
    return copier.copy(Path(source_dir), Path(dest_dir), workspace_root=workspace_root)
