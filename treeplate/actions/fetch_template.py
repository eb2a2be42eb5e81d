"""The ``fetch:template`` action."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..core.errors import InputError, NotAllowedError
from ..core.models import FetchTemplateInput, RenderContext
from ..rendering.security import is_contained
from ..rendering.walker import copy_templated_contents
from .fetch import fetch_contents
from .types import ActionContext, ScmIntegrations, TemplateAction, UrlReader

ACTION_ID = "fetch:template"


def _resolve_output_dir(workspace: Path, target_path: str) -> Path:
    output_dir = (workspace / target_path).resolve()
    if not is_contained(output_dir, workspace):
        raise NotAllowedError(
            "Fetch action targetPath may not specify a path outside the working directory"
        )
    return output_dir


def _parse_input(raw: dict[str, Any]) -> FetchTemplateInput:
    try:
        params = FetchTemplateInput.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(map(str, err['loc']))}: {err['msg'].removeprefix('Value error, ')}"
            for err in e.errors()
        )
        raise InputError(f"Invalid {ACTION_ID} input: {problems}") from e

    if params.resolved_file_extension() and (
        params.copy_without_render or params.cookiecutter_compat
    ):
        raise InputError(
            "Fetch action input extension incompatible with copyWithoutRender and cookiecutterCompat"
        )
    return params


def create_fetch_template_action(
    *,
    reader: UrlReader | None = None,
    integrations: ScmIntegrations | None = None,
    file_mode: int | None = None,
) -> TemplateAction:
    """Create the ``fetch:template`` action.

    Args:
        reader: Reader used for remote template locations
        integrations: Resolves relative template URLs against remote base URLs
        file_mode: Permission bits for rendered files (default: keep source)

    Returns:
        The action, ready to register with a task runner
    """

    def handler(ctx: ActionContext) -> None:
        ctx.logger.info("Fetching template content from remote URL")

        workspace = Path(ctx.workspace_path)
        params = _parse_input(ctx.input)
        output_dir = _resolve_output_dir(workspace, params.target_path)

        template_dir = Path(ctx.create_temporary_directory())
        fetch_contents(
            reader=reader,
            integrations=integrations,
            base_url=ctx.base_url,
            fetch_url=params.url,
            output_path=template_dir,
        )

        ctx.logger.info(f"Processing template {params.url} into {output_dir}")
        context = RenderContext(
            values=params.values, cookiecutter_compat=params.cookiecutter_compat
        )
        created = copy_templated_contents(
            template_dir,
            output_dir,
            context,
            params.copy_without_render or (),
            workspace_root=workspace,
            template_file_extension=params.resolved_file_extension(),
            file_mode=file_mode,
        )

        ctx.logger.info(f"Template result written to {output_dir} ({len(created)} entries)")
        ctx.output("path", str(output_dir))

    return TemplateAction(
        id=ACTION_ID,
        handler=handler,
        description=(
            "Downloads a skeleton, templates variables into file and directory names "
            "and content, and places the result in the workspace"
        ),
    )
