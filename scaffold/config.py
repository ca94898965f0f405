"""scaffold configuration.

Centralised, typed configuration for a generation run. Settings use a
Pydantic v2 model so they are validated at construction time and can be read
from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class ScaffoldConfig(BaseModel):
    """Settings shared by the generator, the options loader and the CLI.

    Instances are typically created once by the CLI entry point (or by the
    caller of :func:`scaffold.generate`) and passed down unchanged.
    """

    template_dir: str = Field(
        default="template",
        description="Subdirectory of the template source that holds the file tree",
    )
    clean: bool = Field(
        default=False,
        description="Remove the destination directory before writing",
    )
    log_prefix: str = Field(default="scaffold", description="Prefix for console log lines")
    descriptor_names: list[str] = Field(
        default=["meta.py", "meta.json", "meta.yaml", "meta.yml"],
        description="Options descriptor file names, in lookup order",
    )

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            SCAFFOLD_TEMPLATE_DIR, SCAFFOLD_CLEAN, SCAFFOLD_LOG_PREFIX.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SCAFFOLD_TEMPLATE_DIR"):
            kwargs["template_dir"] = os.environ["SCAFFOLD_TEMPLATE_DIR"]
        if os.environ.get("SCAFFOLD_CLEAN"):
            kwargs["clean"] = os.environ["SCAFFOLD_CLEAN"].strip().lower() in _TRUTHY
        if os.environ.get("SCAFFOLD_LOG_PREFIX"):
            kwargs["log_prefix"] = os.environ["SCAFFOLD_LOG_PREFIX"]
        return cls(**kwargs)
