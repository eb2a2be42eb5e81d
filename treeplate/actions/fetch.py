"""Retrieval of template sources into a local staging directory."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..core.errors import InputError
from ..rendering.security import resolve_safe_child_path
from .types import ScmIntegrations, UrlReader

logger = logging.getLogger(__name__)


def is_absolute_url(url: str) -> bool:
    """Return True when *url* carries its own scheme."""
    # Single letter schemes are Windows drive letters, not URLs
    return len(urlparse(url).scheme) > 1


def file_url_to_path(url: str) -> Path:
    """Convert a ``file://`` URL to a local path."""
    return Path(url2pathname(urlparse(url).path))


def fetch_contents(
    *,
    reader: UrlReader | None,
    integrations: ScmIntegrations | None,
    base_url: str | None,
    fetch_url: str = ".",
    output_path: Path,
) -> None:
    """Fetch the tree at *fetch_url* into *output_path*.

    Relative URLs are resolved against *base_url*. A ``file://`` base URL
    means the template lives on local disk next to the base location.

    Args:
        reader: Reader for remote trees
        integrations: Resolves relative URLs against remote base URLs
        base_url: Location the template definition was loaded from
        fetch_url: Location of the tree to fetch
        output_path: Directory to populate

    Raises:
        InputError: If the location can't be determined or no reader can fetch it
    """
    fetch_url_is_absolute = is_absolute_url(fetch_url)

    if not fetch_url_is_absolute and base_url and base_url.startswith("file://"):
        base_path = file_url_to_path(base_url)
        base_dir = base_path if base_url.endswith("/") else base_path.parent
        src_dir = resolve_safe_child_path(base_dir, fetch_url, what="Template location")
        if not src_dir.is_dir():
            raise InputError(f"Template directory {str(src_dir)!r} does not exist")
        logger.debug(f"Copying local template {src_dir} → {output_path}")
        shutil.copytree(src_dir, output_path, symlinks=True, dirs_exist_ok=True)
        return

    if fetch_url_is_absolute:
        read_url = fetch_url
    elif base_url:
        integration = integrations.by_url(base_url) if integrations is not None else None
        if integration is None:
            raise InputError(f"No integration found for location {base_url}")
        read_url = integration.resolve_url(url=fetch_url, base=base_url)
    else:
        raise InputError(
            "Failed to fetch, template location could not be determined "
            f"and the fetch URL is relative, {fetch_url}"
        )

    if reader is None:
        raise InputError(f"No URL reader configured, cannot fetch {read_url}")

    logger.debug(f"Reading template tree from {read_url}")
    response = reader.read_tree(read_url)
    os.makedirs(output_path, exist_ok=True)
    response.dir(output_path)
