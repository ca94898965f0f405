"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class, which owns the Jinja2 environments of
one generation run.  The environments start from a base set of helpers and
are extended with the helpers declared by the template's options, so helpers
registered for one run never leak into another.  Also used to evaluate the
condition expressions found in filter and prompt ``when`` clauses.

Comments use the ``{{! ... }}`` form; Jinja's ``{# ... #}`` is disabled so
text such as ``${#items[@]}`` passes through untouched.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from jinja2 import Environment

# A double-curly interpolation marker with no nested braces.
MARKER_PATTERN = re.compile(r"{{([^{}]+)}}")

LF = "\n"
CRLF = "\r\n"


def contains_markers(text: str) -> bool:
    """Return ``True`` if *text* holds at least one ``{{...}}`` marker."""
    return MARKER_PATTERN.search(text) is not None


def _create_environment(newline: str, no_escape: bool) -> Environment:
    return Environment(
        autoescape=not no_escape,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        comment_start_string="{{!",
        comment_end_string="}}",
        newline_sequence=newline,
    )


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template strings against the metadata of a generation run.

    Every helper (base or template supplied) is registered both as a filter
    (``{{ name | shout }}``) and as a global function
    (``{% if if_eq(license, "MIT") %}``).

    Text containing ``\\r\\n`` is rendered with CRLF line endings, anything
    else with LF, so rendered files keep the line endings of their source.
    """

    def __init__(
        self,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
        *,
        no_escape: bool = True,
    ) -> None:
        self._environments = {
            LF: _create_environment(LF, no_escape),
            CRLF: _create_environment(CRLF, no_escape),
        }
        self.env = self._environments[LF]
        self._helpers: dict[str, Callable[..., Any]] = {}
        for name, helper in BASE_HELPERS.items():
            self.register_helper(name, helper)
        for name, helper in (helpers or {}).items():
            self.register_helper(name, helper)

    # -- Helpers -----------------------------------------------------------

    def register_helper(self, name: str, helper: Callable[..., Any]) -> None:
        """Make *helper* available to templates rendered by this instance."""
        if not callable(helper):
            raise TypeError(f"Helper '{name}' must be callable, got {type(helper).__name__}")
        for env in self._environments.values():
            env.filters[name] = helper
            env.globals[name] = helper
        self._helpers[name] = helper

    @property
    def helpers(self) -> list[str]:
        """Sorted names of every registered helper."""
        return sorted(self._helpers)

    # -- Rendering ---------------------------------------------------------

    def render_string(self, template_string: str, context: Mapping[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        newline = CRLF if CRLF in template_string else LF
        template = self._environments[newline].from_string(template_string)
        return template.render(dict(context))

    def evaluate(self, expression: str, context: Mapping[str, Any]) -> Any:
        """Evaluate a single Jinja2 expression (``"useBar and not lint"``).

        Undefined names evaluate to ``None``.
        """
        compiled = self.env.compile_expression(expression, undefined_to_none=True)
        return compiled(**{str(k): v for k, v in context.items()})


# ---------------------------------------------------------------------------
# Base helpers
# ---------------------------------------------------------------------------

def _if_eq(a: Any, b: Any) -> bool:
    """``True`` when both operands are equal."""
    return a == b


def _unless_eq(a: Any, b: Any) -> bool:
    """``True`` when the operands differ."""
    return a != b


BASE_HELPERS: dict[str, Callable[..., Any]] = {
    "if_eq": _if_eq,
    "unless_eq": _unless_eq,
}
