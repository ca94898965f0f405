"""Conditional file filtering.

A template's ``filters`` map a glob to a condition expression::

    filters:
      "src/router/**": "router"
      ".eslintrc.py": "lint and lint_config != 'none'"

Every file matching a glob is removed from the file set when its condition
is false for the current metadata.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from scaffold.errors import ConditionError, FilterError
from scaffold.generator.filetree import FileSet
from scaffold.generator.templates import TemplateRenderer
from scaffold.utils import match_glob


def evaluate_condition(
    condition: str | bool,
    data: Mapping[str, Any],
    renderer: TemplateRenderer,
    *,
    error: type[ConditionError] = ConditionError,
) -> bool:
    """Evaluate *condition* against *data* and return its truth value.

    Boolean conditions are returned as is.

    Raises:
        ConditionError: (or the *error* subclass) if the expression is
            malformed or fails while evaluating.
    """
    if isinstance(condition, bool):
        return condition
    try:
        return bool(renderer.evaluate(condition, data))
    except Exception as exc:
        raise error(condition, exc) from exc


def filter_tree(
    files: FileSet,
    filters: Mapping[str, str | bool] | None,
    data: Mapping[str, Any],
    renderer: TemplateRenderer | None = None,
) -> None:
    """Remove from *files* every entry whose filter condition is false.

    Dot files are matched like any other file.  A missing or empty *filters*
    mapping leaves *files* untouched.
    """
    if not filters:
        return
    renderer = renderer or TemplateRenderer()
    names = list(files)
    for glob, condition in filters.items():
        matched = [name for name in names if name in files and match_glob(name, glob)]
        if not matched:
            continue
        if not evaluate_condition(condition, data, renderer, error=FilterError):
            for name in matched:
                del files[name]
