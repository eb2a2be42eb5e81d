"""Template rendering engine."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import ChainableUndefined, Undefined
from jinja2.exceptions import SecurityError, TemplateError, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from ..core.errors import NotAllowedError, TemplateRenderError
from ..core.models import RenderContext

logger = logging.getLogger(__name__)

VARIABLE_START = "${{"
VARIABLE_END = "}}"
COOKIECUTTER_VARIABLE_START = "{{"
COOKIECUTTER_VARIABLE_END = "}}"

_MARKERS = ("{%", "{#")

# Jinja2 folds every line ending into "\n". CRLF and lone CR are carried
# through the lexer as a marker character (whitespace to Jinja2) plus "\n".
_CRLF_MARKER = "\x1f"
_CR_MARKER = "\x1e"


class TemplateUndefined(ChainableUndefined):
    """Missing values render empty; unsafe attribute access still fails."""

    __slots__ = ()

    def __str__(self) -> str:
        if issubclass(self._undefined_exception, SecurityError):
            self._fail_with_undefined_error()
        return ""


# Integral floats up to this magnitude interpolate without a fractional part
_MAX_INTEGRAL_FLOAT = 1e21


def dump(value: Any, spaces: int | None = None) -> str:
    """Serialize *value* to compact JSON text.

    Args:
        value: Any JSON-compatible value (mapping, list, number, string)
        spaces: Optional indentation width

    Returns:
        JSON text; undefined values serialize to an empty string
    """
    if isinstance(value, Undefined):
        return str(value)
    if spaces is None:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return json.dumps(value, indent=spaces, ensure_ascii=False, default=str)


def jsonify(value: Any, indent: int | None = None) -> str:
    """Serialize *value* the way cookiecutter's ``jsonify`` filter does."""
    if isinstance(value, Undefined):
        return str(value)
    return json.dumps(value, sort_keys=True, indent=indent, default=str)


def stringify_value(value: Any) -> Any:
    """Convert an evaluated expression result to its interpolated form.

    Booleans become ``true``/``false``, integral floats drop the ``.0``,
    ``None`` and undefined values become empty and containers become JSON.
    Anything else is returned unchanged for Jinja2 to stringify.
    """
    if isinstance(value, Undefined):
        return str(value)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < _MAX_INTEGRAL_FLOAT:
        return str(int(value))
    if isinstance(value, (list, tuple, dict)):
        return dump(value)
    return value


FILTERS = {
    "dump": dump,
    "jsonify": jsonify,
}


class TemplateEnvironment(SandboxedEnvironment):
    """Sandboxed environment where mapping keys win over mapping methods.

    ``${{ project.items }}`` looks up the ``items`` value, not ``dict.items``.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except (TypeError, LookupError):
                pass
        return super().getattr(obj, attribute)


def _protect_line_endings(source: str) -> str | None:
    if "\r" not in source or _CRLF_MARKER in source or _CR_MARKER in source:
        return None
    return source.replace("\r\n", f"{_CRLF_MARKER}\n").replace("\r", f"{_CR_MARKER}\n")


def _restore_line_endings(text: str) -> str:
    return text.replace(f"{_CRLF_MARKER}\n", "\r\n").replace(f"{_CR_MARKER}\n", "\r")


def create_environment(*, cookiecutter_compat: bool = False) -> TemplateEnvironment:
    """Create the sandboxed Jinja2 environment used for all rendering.

    Args:
        cookiecutter_compat: Use ``{{ }}`` delimiters instead of ``${{ }}``

    Returns:
        Configured Jinja2 environment
    """
    if cookiecutter_compat:
        start, end = COOKIECUTTER_VARIABLE_START, COOKIECUTTER_VARIABLE_END
    else:
        start, end = VARIABLE_START, VARIABLE_END

    env = TemplateEnvironment(
        variable_start_string=start,
        variable_end_string=end,
        undefined=TemplateUndefined,
        finalize=stringify_value,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters.update(FILTERS)
    return env


class TemplateRenderer:
    """Renders template strings against one ``RenderContext``.

    Used for both path segments and full file contents. Strings without any
    template markers are returned untouched.
    """

    def __init__(self, context: RenderContext) -> None:
        self.context = context
        self._env = create_environment(cookiecutter_compat=context.cookiecutter_compat)
        self._namespace = context.namespace()
        self._markers = (self._env.variable_start_string, *_MARKERS)

    def needs_rendering(self, source: str) -> bool:
        return any(marker in source for marker in self._markers)

    def render_string(self, source: str, *, path: str | None = None) -> str:
        """Render a single template string.

        Args:
            source: Template text (a path segment or whole file content)
            path: Relative template path, used in error messages

        Returns:
            Rendered text

        Raises:
            TemplateRenderError: If the template is malformed or fails to evaluate
            NotAllowedError: If the template breaks out of the sandbox
        """
        if not self.needs_rendering(source):
            return source

        protected = _protect_line_endings(source)
        try:
            rendered = self._env.from_string(protected or source).render(self._namespace)
        except SecurityError as e:
            raise NotAllowedError(
                f"Template in {path!r} attempted an unsafe operation: {e}"
            ) from e
        except TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"Template syntax error at line {e.lineno}: {e.message}",
                template=source,
                path=path,
            ) from e
        except (TemplateError, TypeError, ValueError, ArithmeticError, LookupError) as e:
            raise TemplateRenderError(
                f"Failed to render template: {e}", template=source, path=path
            ) from e
        return _restore_line_endings(rendered) if protected else rendered


def render(template: str, context: RenderContext) -> str:
    """Render *template* against *context*."""
    return TemplateRenderer(context).render_string(template)
