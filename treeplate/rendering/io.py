"""File I/O operations for rendering."""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tempfile
from pathlib import Path

# Number of leading bytes inspected when sniffing for binary content
BINARY_SNIFF_SIZE = 8192


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def file_mode(path: Path) -> int:
    """Return the permission bits of *path*."""
    return stat.S_IMODE(path.stat().st_mode)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_name)


def copy_verbatim(source: Path, dest: Path) -> None:
    """Copy *source* to *dest* byte for byte, keeping its permission bits."""
    ensure_parent(dest)
    shutil.copyfile(source, dest)
    shutil.copymode(source, dest)


def read_template_text(path: Path) -> str | None:
    """Read a template file as UTF-8 text.

    Returns:
        The file's text, or None when the content looks binary
    """
    data = path.read_bytes()
    if b"\x00" in data[:BINARY_SNIFF_SIZE]:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None
