"""Command line entry point.

Usage::

    python -m scaffold templates/python-lib my-app
    python -m scaffold templates/python-lib .          # generate in place
    python -m scaffold templates/python-lib my-app --answers answers.yaml --force
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

import questionary
import yaml

from scaffold.config import ScaffoldConfig
from scaffold.generator import generate
from scaffold.utils import Logger, console


def load_answers(path: str | Path) -> dict[str, Any]:
    """Read pre-supplied answers from a JSON or YAML file.

    Raises:
        ValueError: If the file does not hold a mapping.
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Answers file must contain a mapping: {path}")
    return data


def _confirm(message: str) -> bool:
    return bool(questionary.confirm(message, default=True).ask())


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``python -m scaffold``."""
    parser = argparse.ArgumentParser(
        prog="scaffold",
        description="Generate a project from a template directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  scaffold templates/python-lib my-app\n"
            "  scaffold templates/python-lib . --force\n"
            "  scaffold templates/python-lib my-app --answers answers.yaml\n"
        ),
    )
    parser.add_argument("template", help="Path to the template source directory")
    parser.add_argument(
        "project",
        nargs="?",
        default=".",
        help="Project directory to create (default: current directory)",
    )
    parser.add_argument(
        "--answers", "-a",
        default=None,
        help="JSON or YAML file with answers to use instead of prompting",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Do not ask before writing into an existing directory",
    )
    args = parser.parse_args(argv)

    config = ScaffoldConfig.from_env()
    logger = Logger(config.log_prefix)

    src = Path(args.template)
    if not src.is_dir():
        console.print(f"[bold red]Error:[/bold red] Template not found: {src}")
        return 1

    try:
        answers = load_answers(args.answers) if args.answers else None
    except (OSError, ValueError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Error:[/bold red] Cannot read answers: {exc}")
        return 2

    in_place = args.project in ("", ".")
    dest = Path(args.project).resolve()
    name = dest.name

    if not args.force:
        if in_place and not _confirm("Generate project in current directory?"):
            return 1
        if not in_place and dest.exists() and not _confirm("Target directory exists. Continue?"):
            return 1

    try:
        asyncio.run(generate(name, src, dest, answers=answers, config=config))
    except Exception as exc:
        logger.error(exc)
        return 1

    console.print()
    logger.success('Generated "%s".', name)
    return 0
