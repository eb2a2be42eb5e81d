"""Shared fixtures for treeplate tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from treeplate.actions.types import ActionContext


def build_tree(root: Path, layout: dict[str, Any]) -> None:
    """Create files and directories under *root* from a nested mapping.

    Strings and bytes become files, mappings become directories.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, content in layout.items():
        path = root / name
        if isinstance(content, dict):
            build_tree(path, content)
        elif isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def make_context(
    workspace: Path, staging_root: Path
) -> Callable[..., tuple[ActionContext, dict[str, Any]]]:
    """Build an ActionContext whose temporary directories live in *staging_root*."""

    def _make(**input_patch: Any) -> tuple[ActionContext, dict[str, Any]]:
        outputs: dict[str, Any] = {}
        counter = {"n": 0}

        def create_temporary_directory() -> Path:
            counter["n"] += 1
            path = staging_root / str(counter["n"])
            path.mkdir()
            return path

        ctx = ActionContext(
            input={
                "url": "./skeleton",
                "targetPath": "./target",
                "values": {"test": "value"},
                **input_patch,
            },
            workspace_path=workspace,
            create_temporary_directory=create_temporary_directory,
            base_url="base-url",
            logger=logging.getLogger("tests.action"),
            output=outputs.__setitem__,
        )
        return ctx, outputs

    return _make
