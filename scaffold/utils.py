"""Shared utility functions for scaffold.

Provides Rich-based console logging, the colouriser handed to template hooks,
glob matching for filter and skip-interpolation patterns, git user lookup and
project name validation.
"""

from __future__ import annotations

import functools
import json
import re
import subprocess
from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape

from scaffold.errors import ScaffoldError

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Console logging
# ---------------------------------------------------------------------------


class Logger:
    """Prefixed console logger used by the pipeline and exposed to hooks.

    Every line is printed as ``   <prefix> · <message>``.  Messages are
    escaped so that template output containing square brackets is never
    interpreted as Rich markup.
    """

    def __init__(self, prefix: str = "scaffold") -> None:
        self.prefix = prefix

    def _format(self, message: Any, *args: Any) -> str:
        text = str(message)
        if args:
            text = text % args
        return escape(text)

    def log(self, message: Any, *args: Any) -> None:
        """Print a plain informational line."""
        console.print(f"   [white]{self.prefix}[/white] [dim]·[/dim] {self._format(message, *args)}")

    def success(self, message: Any, *args: Any) -> None:
        """Print a success line."""
        console.print(
            f"   [white]{self.prefix}[/white] [dim]·[/dim] "
            f"[green]{self._format(message, *args)}[/green]"
        )

    def warn(self, message: Any, *args: Any) -> None:
        """Print a yellow warning line to stderr."""
        err_console.print(
            f"   [yellow]{self.prefix}[/yellow] [dim]·[/dim] {self._format(message, *args)}"
        )

    def error(self, message: Any, *args: Any) -> None:
        """Print a red error line to stderr."""
        if isinstance(message, BaseException):
            message = str(message).strip()
        err_console.print(
            f"   [red]{self.prefix}[/red] [dim]·[/dim] {self._format(message, *args)}"
        )

    def fatal(self, message: Any, *args: Any) -> None:
        """Print an error line and raise :class:`ScaffoldError`.

        The CLI turns the exception into a non-zero exit status.
        """
        self.error(message, *args)
        if isinstance(message, ScaffoldError) and not args:
            raise message
        text = str(message).strip()
        raise ScaffoldError(text % args if args else text)


logger = Logger()


def style(text: Any, spec: str) -> str:
    """Wrap *text* in Rich markup, e.g. ``style("done", "bold green")``.

    This is the colouriser passed to template hooks; the result is meant to
    be printed through :data:`console` or :data:`logger`.
    """
    return f"[{spec}]{escape(str(text))}[/{spec}]"


# ---------------------------------------------------------------------------
# Glob matching
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern into a regular expression over POSIX paths.

    Supported syntax::

        *       any run of characters except ``/``
        ?       one character except ``/``
        **      any number of path segments (when it is a whole segment)
        [abc]   character class, ``[!abc]`` negates
        {a,b}   alternatives

    Leading dots are matched like any other character, so ``*`` matches
    ``.gitignore``.  Patterns without a slash only match top-level paths.
    """
    braces = pattern.count("{") == pattern.count("}")
    out: list[str] = []
    depth = 0
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                whole_segment = i == 0 or pattern[i - 1] == "/"
                after = i + 2
                if whole_segment and after < n and pattern[after] == "/":
                    out.append("(?:.*/)?")
                    i = after + 1
                    continue
                if whole_segment and after == n:
                    out.append(".*")
                    i = after
                    continue
                i = after
            else:
                i += 1
            out.append("[^/]*")
            continue
        if c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = end + 1
                continue
        elif c == "{" and braces:
            depth += 1
            out.append("(?:")
        elif c == "," and depth:
            out.append("|")
        elif c == "}" and depth:
            depth -= 1
            out.append(")")
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out))


def match_glob(path: str, patterns: str | Iterable[str]) -> bool:
    """Return ``True`` if *path* matches any of *patterns*.

    Negated patterns (``!foo``) exclude paths matched by earlier patterns, so
    ``["**", "!*.md"]`` matches everything except top-level markdown files.
    When every pattern is negated, paths start out matched: ``"!*.js"``
    matches every path that is not a top-level ``.js`` file.
    """
    patterns = [patterns] if isinstance(patterns, str) else list(patterns)
    path = path.replace("\\", "/")
    matched = bool(patterns) and all(p.startswith("!") for p in patterns)
    for pattern in patterns:
        if pattern.startswith("!"):
            if matched and glob_to_regex(pattern[1:]).fullmatch(path):
                matched = False
        elif not matched and glob_to_regex(pattern).fullmatch(path):
            matched = True
    return matched


# ---------------------------------------------------------------------------
# Git user
# ---------------------------------------------------------------------------


def _git_config(key: str) -> str:
    try:
        result = subprocess.run(
            ["git", "config", "--get", key],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return ""
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def git_user() -> str:
    """Return the local git identity as ``Name <email>``.

    Either half is omitted when it is not configured; an empty string is
    returned when git is missing or has no identity at all.
    """
    name = _git_config("user.name")
    email = _git_config("user.email")
    if name:
        # Escape quotes and backslashes so the value is safe inside templates.
        name = json.dumps(name)[1:-1]
    if email:
        email = f" <{email}>"
    return (name + email).strip()


# ---------------------------------------------------------------------------
# Project name validation
# ---------------------------------------------------------------------------

_DIST_NAME_RE = re.compile(r"^([A-Z0-9]|[A-Z0-9][A-Z0-9._-]*[A-Z0-9])$", re.IGNORECASE)
_DIST_NAME_CHARS_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_MAX_NAME_LENGTH = 214


def validate_project_name(name: str) -> list[str]:
    """Check *name* against the Python distribution name rules.

    Returns a list of human-readable problems; an empty list means the name
    is valid.

    Examples::

        validate_project_name("my-app")   -> []
        validate_project_name(" my app ") -> ["name cannot contain leading or trailing spaces", ...]
    """
    problems: list[str] = []
    if not name:
        return ["name length must be greater than zero"]
    if name.strip() != name:
        problems.append("name cannot contain leading or trailing spaces")
    if len(name) > _MAX_NAME_LENGTH:
        problems.append(f"name can no longer contain more than {_MAX_NAME_LENGTH} characters")
    if not _DIST_NAME_CHARS_RE.match(name):
        problems.append("name can only contain ASCII letters, digits, '.', '_' and '-'")
    elif not _DIST_NAME_RE.match(name):
        problems.append("name must start and end with a letter or digit")
    return problems
