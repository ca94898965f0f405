"""Shared pytest fixtures for the scaffold test suite.

Provides reusable fixtures for:
- Template source directories built on the fly
- A scripted prompter that stands in for questionary
- A neutral git identity so option defaults are deterministic
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from scaffold.generator.filetree import FileTree, TemplateFile
from scaffold.generator.options import Prompt


# ---------------------------------------------------------------------------
# Git identity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_git_user():
    """Pretend git has no configured identity unless a test says otherwise."""
    with patch("scaffold.generator.options.git_user", return_value="") as mocked:
        yield mocked


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------

class ScriptedPrompter:
    """Answers prompts from a dict and records every question asked.

    Keys missing from the script are answered with the prompt's default.
    """

    def __init__(self, script: dict[str, Any] | None = None) -> None:
        self.script = dict(script or {})
        self.asked: list[tuple[str, Any]] = []

    async def prompt(self, key: str, prompt: Prompt, default: Any) -> Any:
        self.asked.append((key, default))
        if key in self.script:
            return self.script[key]
        return default


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """A prompter that accepts every default."""
    return ScriptedPrompter()


@pytest.fixture
def scripted_prompter():
    """Factory for prompters with canned answers.

    Usage:
        def test_something(scripted_prompter):
            prompter = scripted_prompter({"lint": False})
    """
    return ScriptedPrompter


# ---------------------------------------------------------------------------
# Template sources
# ---------------------------------------------------------------------------

def _write_files(root: Path, files: dict[str, str | bytes]) -> None:
    for rel, contents in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(contents, bytes):
            path.write_bytes(contents)
        else:
            path.write_text(contents, encoding="utf-8")


@pytest.fixture
def make_template(tmp_path: Path):
    """Factory that writes a template source directory.

    Usage:
        src = make_template(
            {"README.md": "# {{ name }}"},
            meta={"prompts": {...}},          # written as meta.json
            meta_py="meta = {...}",           # or as meta.py
        )
    """
    counter = {"n": 0}

    def factory(
        files: dict[str, str | bytes],
        *,
        meta: dict[str, Any] | None = None,
        meta_py: str | None = None,
        meta_yaml: str | None = None,
    ) -> Path:
        counter["n"] += 1
        src = tmp_path / f"template-src-{counter['n']}"
        (src / "template").mkdir(parents=True)
        _write_files(src / "template", files)
        if meta is not None:
            (src / "meta.json").write_text(json.dumps(meta), encoding="utf-8")
        if meta_py is not None:
            (src / "meta.py").write_text(textwrap.dedent(meta_py), encoding="utf-8")
        if meta_yaml is not None:
            (src / "meta.yaml").write_text(textwrap.dedent(meta_yaml), encoding="utf-8")
        return src

    return factory


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """Destination directory for generated projects (not created)."""
    return tmp_path / "out" / "demo-app"


@pytest.fixture
def tree_with_metadata(tmp_path: Path):
    """Factory returning a FileTree with in-memory files and metadata.

    Usage:
        tree, files = tree_with_metadata({"a.txt": b"hi"}, {"name": "foo"})
    """

    def factory(
        contents: dict[str, bytes], metadata: dict[str, Any] | None = None
    ) -> tuple[FileTree, dict[str, TemplateFile]]:
        tree = FileTree(tmp_path)
        tree.metadata(metadata or {})
        files = {path: TemplateFile(contents=data) for path, data in contents.items()}
        return tree, files

    return factory
