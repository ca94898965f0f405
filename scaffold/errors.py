"""Exception types raised by the generation pipeline."""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for every error raised by scaffold itself."""


class OptionsError(ScaffoldError):
    """Raised when a template's options descriptor cannot be loaded."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class PromptAborted(ScaffoldError):
    """Raised when the user cancels an interactive question."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Prompt '{key}' was cancelled")


class ConditionError(ScaffoldError):
    """Raised when a condition expression cannot be evaluated."""

    kind = "condition"

    def __init__(self, condition: str, cause: Exception) -> None:
        self.condition = condition
        self.cause = cause
        super().__init__(f"Error when evaluating {self.kind}: {condition}: {cause}")


class FilterError(ConditionError):
    """Raised when a filter condition cannot be evaluated."""

    kind = "filter condition"


class RenderError(ScaffoldError):
    """Raised when a template file fails to render.

    The message is prefixed with the offending file path in brackets, e.g.
    ``[src/main.py] unexpected '}'``.
    """

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"[{path}] {cause}")
