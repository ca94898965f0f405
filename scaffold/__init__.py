"""scaffold -- generate projects from template directories."""

from scaffold.config import ScaffoldConfig
from scaffold.errors import (
    ConditionError,
    FilterError,
    OptionsError,
    PromptAborted,
    RenderError,
    ScaffoldError,
)
from scaffold.generator import generate

__version__ = "0.1.0"

__all__ = [
    "ConditionError",
    "FilterError",
    "OptionsError",
    "PromptAborted",
    "RenderError",
    "ScaffoldError",
    "ScaffoldConfig",
    "generate",
]
