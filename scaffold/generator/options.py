"""Template options descriptor loading.

A template source directory may carry a descriptor next to its ``template/``
tree.  The first of ``meta.py``, ``meta.json``, ``meta.yaml`` and
``meta.yml`` found is loaded:

* ``meta.py`` is executed as a module and must expose a mapping named
  ``meta`` (otherwise its public module-level names are used).  This is the
  only format that can carry hooks and helpers.
* ``meta.json`` / ``meta.yaml`` hold plain data (prompts, filters, messages).

The raw mapping is validated into an :class:`Options` model.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import json
from collections.abc import Callable, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from scaffold.config import ScaffoldConfig
from scaffold.errors import OptionsError
from scaffold.utils import git_user, validate_project_name


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Prompt(BaseModel):
    """One question definition, keyed by metadata field in ``Options.prompts``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = Field(default="string", description="string, confirm, list, checkbox, ...")
    message: str | None = Field(default=None, description="Question text")
    label: str | None = Field(default=None, description="Fallback question text")
    default: Any = None
    choices: list[Any] = Field(default_factory=list)
    when: str | bool | None = Field(
        default=None, description="Condition expression or boolean; skip when false"
    )
    validate_fn: Callable[..., Any] | None = Field(default=None, alias="validate")
    required: bool = False

    def question(self, key: str) -> str:
        """The text shown to the user."""
        return self.message or self.label or key


class Options(BaseModel):
    """Everything a template declares about how it should be generated.

    ``complete`` takes priority over ``complete_message``: when both are set
    only the hook runs.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, extra="allow")

    helpers: dict[str, Callable[..., Any]] = Field(default_factory=dict)
    prompts: dict[str, Prompt] = Field(default_factory=dict)
    filters: dict[str, str | bool] = Field(default_factory=dict)
    skip_interpolation: list[str] = Field(default_factory=list, alias="skipInterpolation")
    before: Callable[..., Any] | None = None
    after: Callable[..., Any] | None = None
    complete: Callable[..., Any] | None = None
    complete_message: str | None = Field(default=None, alias="completeMessage")

    @model_validator(mode="before")
    @classmethod
    def _normalise_hooks(cls, data: Any) -> Any:
        """Fold the ``metalsmith`` hook forms into ``before`` / ``after``.

        A bare callable replaces ``after``; a mapping contributes its
        ``before`` and ``after`` entries.
        """
        if not isinstance(data, Mapping) or "metalsmith" not in data:
            return data
        data = dict(data)
        hooks = data.pop("metalsmith")
        if callable(hooks):
            data["after"] = hooks
        elif isinstance(hooks, Mapping):
            for key in ("before", "after"):
                if callable(hooks.get(key)):
                    data.setdefault(key, hooks[key])
        return data

    @field_validator("skip_interpolation", mode="before")
    @classmethod
    def _coerce_globs(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("filters", "helpers", "prompts", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_options(
    name: str,
    src: str | Path,
    config: ScaffoldConfig | None = None,
) -> Options:
    """Load and validate the options descriptor of the template at *src*.

    Adds a ``name`` prompt defaulting to *name* (validated as a project
    name) and, when git has a configured identity, an ``author`` prompt
    default.

    Raises:
        OptionsError: If the descriptor cannot be read or is invalid.
    """
    config = config or ScaffoldConfig()
    path = find_descriptor(Path(src), config.descriptor_names)
    data = read_descriptor(path) if path is not None else {}

    if "schema" in data:
        data["prompts"] = data.pop("schema")
    if not isinstance(data.get("prompts") or {}, Mapping):
        raise OptionsError("'prompts' must be a mapping of field name to question", str(path or ""))
    data["prompts"] = dict(data.get("prompts") or {})

    _set_default(data["prompts"], "name", name)
    _set_validate_name(data["prompts"])
    author = git_user()
    if author:
        _set_default(data["prompts"], "author", author)

    try:
        return Options.model_validate(data)
    except ValidationError as exc:
        raise OptionsError(f"Invalid options descriptor {path}: {exc}", str(path or "")) from exc


def find_descriptor(src: Path, names: list[str]) -> Path | None:
    """Return the first existing descriptor file under *src*, if any."""
    for candidate in names:
        path = src / candidate
        if path.is_file():
            return path
    return None


def read_descriptor(path: Path) -> dict[str, Any]:
    """Read a descriptor file into a plain dict.

    Raises:
        OptionsError: If the file cannot be parsed or is not a mapping.
    """
    try:
        if path.suffix == ".py":
            data = _load_python(path)
        elif path.suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OptionsError:
        raise
    except Exception as exc:
        raise OptionsError(f"Failed to load options from {path}: {exc}", str(path)) from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise OptionsError(f"{path.name} needs to expose a mapping", str(path))
    return dict(data)


def _load_python(path: Path) -> Any:
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"scaffold_meta_{digest}", path)
    if spec is None or spec.loader is None:
        raise OptionsError(f"Cannot import {path}", str(path))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    if hasattr(module, "meta"):
        return module.meta
    return _public_names(module)


def _public_names(module: ModuleType) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(module).items()
        if not key.startswith("_") and not inspect.ismodule(value)
    }


def _set_default(prompts: dict[str, Any], key: str, value: Any) -> None:
    """Set the default answer of prompt *key*, creating a string prompt if needed."""
    prompt = prompts.get(key)
    if isinstance(prompt, Prompt):
        prompts[key] = prompt.model_copy(update={"default": value})
    elif isinstance(prompt, Mapping):
        prompts[key] = {**prompt, "default": value}
    else:
        prompts[key] = {"type": "string", "default": value}


def _set_validate_name(prompts: dict[str, Any]) -> None:
    """Run the project name check before the template's own ``validate``."""
    prompt = prompts["name"]
    custom = prompt.validate_fn if isinstance(prompt, Prompt) else prompt.get("validate")

    def validate_name(value: Any) -> bool | str:
        problems = validate_project_name(str(value))
        if problems:
            return "Sorry, " + " and ".join(problems) + "."
        if callable(custom):
            return custom(value)
        return True

    if isinstance(prompt, Prompt):
        prompts["name"] = prompt.model_copy(update={"validate_fn": validate_name})
    else:
        prompts["name"] = {**prompt, "validate": validate_name}
