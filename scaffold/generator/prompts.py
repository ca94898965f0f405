"""Interactive questions.

Asks every prompt declared by a template, in declaration order, and writes
the answers into the run's metadata.  Prompts are presented through a
``Prompter``; the default one uses questionary.  Answers supplied up front
(``answers={"name": "demo"}``) are used without asking, which makes runs
scriptable and testable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import questionary

from scaffold.errors import PromptAborted, ScaffoldError
from scaffold.generator.filters import evaluate_condition
from scaffold.generator.options import Prompt
from scaffold.generator.templates import TemplateRenderer, contains_markers


class Prompter(Protocol):
    """Something that can put one question to the user."""

    async def prompt(self, key: str, prompt: Prompt, default: Any) -> Any:
        """Return the answer, or ``None`` if the user cancelled."""
        ...


# ---------------------------------------------------------------------------
# questionary prompter
# ---------------------------------------------------------------------------


class QuestionaryPrompter:
    """Terminal prompter built on questionary.

    Prompt types map onto questionary questions as follows::

        string / input   -> text
        password         -> password
        number           -> text, answer converted to int or float
        confirm/boolean  -> confirm
        list / select    -> select
        rawlist          -> rawlist
        checkbox         -> checkbox
    """

    async def prompt(self, key: str, prompt: Prompt, default: Any) -> Any:
        question = self.build(key, prompt, default)
        answer = await question.ask_async()
        if answer is not None and prompt.type == "number":
            return _to_number(answer)
        return answer

    def build(self, key: str, prompt: Prompt, default: Any) -> questionary.Question:
        message = prompt.question(key)
        kind = prompt.type
        validate = _validator(prompt)

        if kind in ("confirm", "boolean"):
            return questionary.confirm(message, default=True if default is None else bool(default))

        if kind in ("list", "select", "rawlist"):
            choices = [_choice(c) for c in prompt.choices]
            values = [c.value for c in choices]
            kwargs: dict[str, Any] = {}
            if default in values:
                kwargs["default"] = default
            if kind == "rawlist":
                return questionary.rawlist(message, choices=choices, **kwargs)
            return questionary.select(message, choices=choices, **kwargs)

        if kind == "checkbox":
            selected = set(default) if isinstance(default, (list, tuple, set)) else set()
            choices = [_choice(c, selected) for c in prompt.choices]
            return questionary.checkbox(message, choices=choices)

        text_default = "" if default is None else str(default)
        if kind == "password":
            return questionary.password(message, default=text_default, validate=validate)
        if kind == "number":
            return questionary.text(
                message, default=text_default, validate=_number_validator(validate)
            )
        return questionary.text(message, default=text_default, validate=validate)


def _choice(raw: Any, selected: set[Any] | None = None) -> questionary.Choice:
    """Build a questionary Choice from a string or ``{name, value, checked}``."""
    selected = selected or set()
    if isinstance(raw, Mapping):
        title = str(raw.get("name", raw.get("value", "")))
        value = raw.get("value", title)
        checked = bool(raw.get("checked", False)) or value in selected
        return questionary.Choice(title=title, value=value, checked=checked)
    return questionary.Choice(title=str(raw), value=raw, checked=raw in selected)


def _validator(prompt: Prompt):
    def validate(value: Any) -> bool | str:
        if prompt.required and (value is None or str(value).strip() == ""):
            return "This field is required."
        if prompt.validate_fn is None:
            return True
        return prompt.validate_fn(value)

    return validate


def _number_validator(validate):
    def check(value: str) -> bool | str:
        try:
            _to_number(value)
        except ValueError:
            return "Please enter a number."
        return validate(value)

    return check


def _to_number(value: Any) -> int | float:
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


# ---------------------------------------------------------------------------
# Question stage
# ---------------------------------------------------------------------------


async def ask(
    prompts: Mapping[str, Prompt | Mapping[str, Any]] | None,
    data: dict[str, Any],
    *,
    answers: Mapping[str, Any] | None = None,
    prompter: Prompter | None = None,
    renderer: TemplateRenderer | None = None,
) -> None:
    """Resolve every prompt into ``data[key]``.

    Prompts are handled one after another.  A prompt whose ``when``
    condition is false is skipped.  Keys present in *answers* are taken
    from there (after running the prompt's validator) instead of asking.

    Raises:
        PromptAborted: If the user cancels a question.
        ConditionError: If a ``when`` condition cannot be evaluated.
        ScaffoldError: If a pre-supplied answer fails validation.
    """
    if not prompts:
        return
    renderer = renderer or TemplateRenderer()
    prompter = prompter or QuestionaryPrompter()

    for key, prompt in prompts.items():
        if not isinstance(prompt, Prompt):
            prompt = Prompt.model_validate(prompt)
        if prompt.when not in (None, "") and not evaluate_condition(prompt.when, data, renderer):
            continue

        if answers is not None and key in answers:
            answer = answers[key]
            _check_answer(key, prompt, answer)
        else:
            default = _resolve_default(prompt.default, data, renderer)
            answer = await prompter.prompt(key, prompt, default)
            if answer is None:
                raise PromptAborted(key)

        store_answer(data, key, answer)


def store_answer(data: dict[str, Any], key: str, answer: Any) -> None:
    """Write one answer into the metadata.

    Multiple-choice answers become ``{choice: True, ...}`` so templates can
    test ``features.router``; double quotes in strings are backslash
    escaped so answers can be dropped into quoted strings.
    """
    if isinstance(answer, (list, tuple, set)):
        data[key] = {str(choice): True for choice in answer}
    elif isinstance(answer, str):
        data[key] = answer.replace('"', '\\"')
    else:
        data[key] = answer


def _resolve_default(default: Any, data: Mapping[str, Any], renderer: TemplateRenderer) -> Any:
    if callable(default):
        return default(data)
    if isinstance(default, str) and contains_markers(default):
        return renderer.render_string(default, data)
    return default


def _check_answer(key: str, prompt: Prompt, answer: Any) -> None:
    result = _validator(prompt)(answer)
    if result is not True:
        message = result if isinstance(result, str) else "invalid value"
        raise ScaffoldError(f"Invalid answer for '{key}': {message}")
