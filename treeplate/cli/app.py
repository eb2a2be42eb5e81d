"""Main CLI application."""

from __future__ import annotations

import contextlib
import logging
import tempfile
from pathlib import Path
from typing import Any

import typer
from typing_extensions import Annotated

from ..actions.fetch_template import create_fetch_template_action
from ..actions.types import ActionContext
from ..core.errors import TreeplateError
from ..core.settings import Settings
from .parsers import load_values_file, parse_file_mode, parse_value

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="treeplate",
    help="Render a template directory tree into a workspace.",
)


@app.callback()
def configure(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Render template trees with ${{ }} placeholders."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=Settings().log_format,
    )


@app.command()
def fetch(
    url: Annotated[
        str,
        typer.Argument(help="Template location, relative to --base-url or absolute."),
    ],
    target_path: Annotated[
        str,
        typer.Option(
            "--target-path",
            help="Output directory, relative to the workspace (default: ./).",
            metavar="PATH",
        ),
    ] = "./",
    workspace: Annotated[
        str,
        typer.Option(
            "--workspace",
            help="Working directory the output must stay in (default: cwd).",
            metavar="DIR",
        ),
    ] = "",
    values: Annotated[
        list[str],
        typer.Option(
            "--value",
            help="Template value (format: KEY=VALUE). Repeatable.",
            metavar="KEY=VALUE",
        ),
    ] = [],
    values_file: Annotated[
        str,
        typer.Option(
            "--values-file",
            help="YAML or JSON file with template values. --value entries win.",
            metavar="FILE",
        ),
    ] = "",
    copy_without_render: Annotated[
        list[str],
        typer.Option(
            "--copy-without-render",
            help="Glob pattern of entries copied without rendering. Repeatable.",
            metavar="PATTERN",
        ),
    ] = [],
    cookiecutter_compat: Annotated[
        bool,
        typer.Option(
            "--cookiecutter-compat",
            help="Use {{ cookiecutter.* }} syntax instead of ${{ }}.",
        ),
    ] = False,
    template_file_extension: Annotated[
        str,
        typer.Option(
            "--template-file-extension",
            help="Only render files with this extension and strip it.",
            metavar="EXT",
        ),
    ] = "",
    base_url: Annotated[
        str,
        typer.Option(
            "--base-url",
            help="Location relative URLs are resolved against (default: cwd).",
            metavar="URL",
        ),
    ] = "",
    file_mode: Annotated[
        str,
        typer.Option(
            "--mode",
            help="File permissions in octal for rendered files (default: keep source).",
            metavar="OCTAL",
        ),
    ] = "",
) -> None:
    """Fetch a template tree and render it into the workspace."""
    settings = Settings()

    template_values: dict[str, Any] = {}
    if values_file:
        template_values.update(load_values_file(Path(values_file)))
    template_values.update(dict(map(parse_value, values)))

    mode = parse_file_mode(file_mode) if file_mode else settings.file_mode
    workspace_path = Path(workspace) if workspace else settings.workspace_path

    action_input: dict[str, Any] = {
        "url": url,
        "targetPath": target_path,
        "values": template_values,
        "cookiecutterCompat": cookiecutter_compat,
    }
    if copy_without_render:
        action_input["copyWithoutRender"] = copy_without_render
    if template_file_extension:
        action_input["templateFileExtension"] = template_file_extension

    logger.debug(f"Input: {action_input}")

    outputs: dict[str, Any] = {}
    action = create_fetch_template_action(file_mode=mode)

    with contextlib.ExitStack() as stack:

        def create_temporary_directory() -> Path:
            return Path(stack.enter_context(tempfile.TemporaryDirectory(prefix="treeplate-")))

        ctx = ActionContext(
            input=action_input,
            workspace_path=workspace_path,
            create_temporary_directory=create_temporary_directory,
            base_url=base_url or settings.resolved_base_url(),
            logger=logger,
            output=outputs.__setitem__,
        )
        try:
            action.handler(ctx)
        except TreeplateError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    typer.echo(outputs["path"])


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
