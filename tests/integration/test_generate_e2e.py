"""End-to-end generation of realistic templates.

These tests build a complete template source directory (descriptor, nested
file tree, binary assets, dot files) and run the full generator against it,
then inspect the written project.

No network or interactive terminal is required: answers come from the
scripted prompter and pre-supplied mappings.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from scaffold import generate
from scaffold.config import ScaffoldConfig


LOGO = b"\x89PNG\r\n\x1a\n\x00\x00{{ not a marker }}\xff\xfe"

META_YAML = """
prompts:
  description:
    type: string
    message: Project description
    default: A Python project
  lint:
    type: confirm
    message: Use a linter?
  lintConfig:
    type: list
    message: Pick a lint config
    when: lint
    choices: [strict, relaxed]
  features:
    type: checkbox
    message: Features
    choices: [router, store]
filters:
  ".ruff.toml": lint
  "src/router/**": features.router
  "src/store/**": features.store
skipInterpolation: "assets/**"
completeMessage: |
  To get started:

    cd {{ destDirName }}
"""

FILES: dict[str, str | bytes] = {
    "pyproject.json": (
        '{"name": "{{ name }}", "description": "{{ description }}", '
        '"lint": {{ "true" if lint else "false" }}}\n'
    ),
    "README.md": (
        "# {{ name }}\n"
        "{% if lint %}\n"
        "Linted with {{ lintConfig }}.\n"
        "{% endif %}\n"
        "{% for feature in features %}\n"
        "- {{ feature }}\n"
        "{% endfor %}\n"
    ),
    ".ruff.toml": "[lint]\nselect = [\"{{ 'ALL' if lintConfig == 'strict' else 'E' }}\"]\n",
    "src/router/__init__.py": "ROUTES = []\n",
    "src/store/__init__.py": "STATE = {}\n",
    "src/main.py": "print('{{ name }}')\n",
    "assets/logo.png": LOGO,
    "assets/index.html": "<h1>{{ name }}</h1>\n",
    ".gitignore": "__pycache__/\n",
}


@pytest.mark.integration
class TestGenerateProject:
    """Full runs against the descriptor above."""

    async def test_with_linter_and_router(self, make_template, dest_dir, scripted_prompter, capsys):
        src = make_template(FILES, meta_yaml=META_YAML)
        prompter = scripted_prompter({"lint": True, "lintConfig": "strict", "features": ["router"]})
        done = MagicMock()

        data = await generate("demo-app", src, dest_dir, done, prompter=prompter)

        done.assert_called_once_with(None)
        assert [key for key, _ in prompter.asked] == [
            "description", "lint", "lintConfig", "features", "name",
        ]
        assert data["features"] == {"router": True}

        package = json.loads((dest_dir / "pyproject.json").read_text(encoding="utf-8"))
        assert package == {"name": "demo-app", "description": "A Python project", "lint": True}

        readme = (dest_dir / "README.md").read_text(encoding="utf-8")
        assert readme == "# demo-app\nLinted with strict.\n- router\n"

        assert (dest_dir / ".ruff.toml").read_text(encoding="utf-8") == '[lint]\nselect = ["ALL"]\n'
        assert (dest_dir / "src" / "router" / "__init__.py").exists()
        assert not (dest_dir / "src" / "store").exists()
        assert (dest_dir / "src" / "main.py").read_text(encoding="utf-8") == "print('demo-app')\n"

        assert (dest_dir / "assets" / "logo.png").read_bytes() == LOGO
        assert (dest_dir / "assets" / "index.html").read_text(encoding="utf-8") == "<h1>{{ name }}</h1>\n"
        assert (dest_dir / ".gitignore").read_text(encoding="utf-8") == "__pycache__/\n"

        out = capsys.readouterr().out
        assert "   To get started:" in out
        assert "     cd demo-app" in out

    async def test_without_linter(self, make_template, dest_dir, scripted_prompter):
        src = make_template(FILES, meta_yaml=META_YAML)
        prompter = scripted_prompter({"lint": False, "features": []})

        data = await generate("demo-app", src, dest_dir, prompter=prompter)

        assert "lintConfig" not in [key for key, _ in prompter.asked]
        assert "lintConfig" not in data
        assert not (dest_dir / ".ruff.toml").exists()
        assert not (dest_dir / "src" / "router").exists()
        assert (dest_dir / "README.md").read_text(encoding="utf-8") == "# demo-app\n"

    async def test_answers_escape_quotes(self, make_template, dest_dir, prompter):
        src = make_template(FILES, meta_yaml=META_YAML)
        answers = {
            "description": 'The "best" app',
            "lint": False,
            "features": ["store"],
        }

        await generate("demo-app", src, dest_dir, answers=answers, prompter=prompter)

        package = json.loads((dest_dir / "pyproject.json").read_text(encoding="utf-8"))
        assert package["description"] == 'The "best" app'
        assert (dest_dir / "src" / "store" / "__init__.py").exists()
        assert [key for key, _ in prompter.asked] == ["name"]

    async def test_file_modes_preserved(self, make_template, dest_dir, prompter):
        src = make_template({"bin/run.sh": "#!/bin/sh\necho {{ name }}\n"})
        script = src / "template" / "bin" / "run.sh"
        script.chmod(0o755)

        await generate("demo-app", src, dest_dir, prompter=prompter)

        written = dest_dir / "bin" / "run.sh"
        assert written.read_text(encoding="utf-8") == "#!/bin/sh\necho demo-app\n"
        assert written.stat().st_mode & 0o777 == 0o755


@pytest.mark.integration
class TestPythonDescriptor:
    """Templates whose descriptor is a Python module with hooks and helpers."""

    META_PY = """
    def shout(value):
        return str(value).upper() + "!"


    def before(tree, options, helpers):
        tree.metadata()["year"] = 2024
        helpers.logger.log("preparing %s", tree.metadata()["destDirName"])


    def after(tree, options, helpers):
        options.helpers["wrap"] = lambda value: "<" + str(value) + ">"


    def complete(data, helpers):
        helpers.logger.success("wrote %d files", len(helpers.files))


    meta = {
        "helpers": {"shout": shout},
        "prompts": {"author": {"type": "string", "default": "{{ destDirName | shout }}"}},
        "metalsmith": {"before": before, "after": after},
        "complete": complete,
        "completeMessage": "never shown",
    }
    """

    async def test_hooks_and_helpers(self, make_template, dest_dir, prompter, capsys):
        src = make_template(
            {
                "LICENSE": "Copyright {{ year }} {{ author }}\n",
                "NOTICE": "{{ name | wrap }}\n",
            },
            meta_py=self.META_PY,
        )

        await generate("demo-app", src, dest_dir, prompter=prompter)

        assert dict(prompter.asked)["author"] == "DEMO-APP!"
        assert (dest_dir / "LICENSE").read_text(encoding="utf-8") == "Copyright 2024 DEMO-APP!\n"
        assert (dest_dir / "NOTICE").read_text(encoding="utf-8") == "<demo-app>\n"
        out = capsys.readouterr().out
        assert "preparing demo-app" in out
        assert "wrote 2 files" in out
        assert "never shown" not in out

    async def test_custom_template_dir_and_clean(self, tmp_path: Path, dest_dir, prompter):
        src = tmp_path / "tpl"
        (src / "skeleton").mkdir(parents=True)
        (src / "skeleton" / "app.py").write_text("NAME = '{{ name }}'\n", encoding="utf-8")
        dest_dir.mkdir(parents=True)
        (dest_dir / "old.py").write_text("", encoding="utf-8")

        config = ScaffoldConfig(template_dir="skeleton", clean=True)
        await generate("demo-app", src, dest_dir, prompter=prompter, config=config)

        assert sorted(p.name for p in dest_dir.iterdir()) == ["app.py"]
        assert (dest_dir / "app.py").read_text(encoding="utf-8") == "NAME = 'demo-app'\n"
