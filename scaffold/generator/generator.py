"""Main generation orchestrator.

Takes a template source directory (a ``template/`` file tree plus an optional
``meta.*`` options descriptor) and a destination, asks the template's
questions, drops the files whose filter conditions are false, renders every
file that contains ``{{ ... }}`` markers and writes the result.

Quick usage::

    from scaffold import generate

    data = await generate("my-app", "templates/python-lib", "./my-app")
"""

from __future__ import annotations

import asyncio
import inspect
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scaffold.config import ScaffoldConfig
from scaffold.errors import RenderError
from scaffold.generator.filetree import FileSet, FileTree, Middleware
from scaffold.generator.filters import filter_tree
from scaffold.generator.options import Prompt, load_options
from scaffold.generator.prompts import Prompter, ask
from scaffold.generator.templates import TemplateRenderer, contains_markers
from scaffold.utils import Logger, console, err_console, match_glob, style

Done = Callable[[BaseException | None], Any]


@dataclass
class HookHelpers:
    """Capabilities handed to template hooks.

    ``files`` is only set for the ``complete`` hook, where it holds the
    final file set.
    """

    style: Callable[[Any, str], str]
    logger: Logger
    files: FileSet | None = None


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


async def generate(
    name: str,
    src: str | Path,
    dest: str | Path,
    done: Done | None = None,
    *,
    answers: Mapping[str, Any] | None = None,
    prompter: Prompter | None = None,
    config: ScaffoldConfig | None = None,
) -> dict[str, Any]:
    """Generate the template at *src* into *dest*.

    Args:
        name: Project name; becomes ``destDirName`` and the default answer
            of the ``name`` prompt.
        src: Template source directory.
        dest: Destination directory.  Existing files that the template does
            not produce are left alone unless ``config.clean`` is set.
        done: Called exactly once with the error (or ``None``) once the
            tree has been written or generation failed.  When omitted the
            error is raised instead.
        answers: Pre-supplied answers; matching prompts are not asked.
        prompter: Prompter used for the remaining questions.
        config: Run settings; defaults to ``ScaffoldConfig()``.

    Returns:
        The run's metadata (template defaults, injected context, answers).
    """
    config = config or ScaffoldConfig()
    src = Path(src)
    dest = Path(dest).resolve()
    run_logger = Logger(config.log_prefix)
    data: dict[str, Any] = {}

    try:
        opts = load_options(name, src, config)
        tree = FileTree(src / config.template_dir)
        data = tree.metadata({
            "destDirName": name,
            "inPlace": dest == Path.cwd().resolve(),
            "noEscape": True,
        })
        renderer = TemplateRenderer(opts.helpers, no_escape=data["noEscape"])
        helpers = HookHelpers(style=style, logger=run_logger)

        if opts.before is not None:
            await _call_hook(opts.before, tree, opts, helpers)

        (
            tree.use(ask_questions(opts.prompts, renderer, answers=answers, prompter=prompter))
            .use(filter_files(opts.filters, renderer))
            .use(render_template_files(opts.skip_interpolation, renderer))
        )

        if opts.after is not None:
            await _call_hook(opts.after, tree, opts, helpers)
        # Hooks may have added helpers.
        for helper_name, helper in opts.helpers.items():
            renderer.register_helper(helper_name, helper)
    except Exception as exc:
        if done is None:
            raise
        done(exc)
        return data

    tree.clean(config.clean).source(".").destination(dest)

    error: Exception | None = None
    try:
        await tree.build()
    except Exception as exc:
        error = exc

    if done is not None:
        done(error)

    if opts.complete is not None:
        try:
            await _call_hook(
                opts.complete, data, HookHelpers(style=style, logger=run_logger, files=tree.files)
            )
        except Exception as exc:
            run_logger.error(f"Error in complete hook: {exc}")
    else:
        log_message(opts.complete_message, data, renderer)

    if error is not None and done is None:
        raise error
    return data


async def _call_hook(hook: Callable[..., Any], *args: Any) -> None:
    """Call a template hook, awaiting it when it is a coroutine function."""
    result = hook(*args)
    if inspect.isawaitable(result):
        await result


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def ask_questions(
    prompts: Mapping[str, Prompt] | None,
    renderer: TemplateRenderer | None = None,
    *,
    answers: Mapping[str, Any] | None = None,
    prompter: Prompter | None = None,
) -> Middleware:
    """Create a middleware that asks *prompts* and stores the answers."""

    async def middleware(files: FileSet, tree: FileTree) -> None:
        await ask(prompts, tree.metadata(), answers=answers, prompter=prompter, renderer=renderer)

    return middleware


def filter_files(
    filters: Mapping[str, str | bool] | None,
    renderer: TemplateRenderer | None = None,
) -> Middleware:
    """Create a middleware that drops files whose filter condition is false."""

    def middleware(files: FileSet, tree: FileTree) -> None:
        filter_tree(files, filters, tree.metadata(), renderer)

    return middleware


def render_template_files(
    skip_interpolation: str | list[str] | None = None,
    renderer: TemplateRenderer | None = None,
) -> Middleware:
    """Create a middleware that renders file contents against the metadata.

    Files matching *skip_interpolation* (dot files included) and files
    without ``{{ ... }}`` markers are left byte-identical.  Files render
    concurrently and independently; once all have finished, the first
    failure (in file order) is raised as a :class:`RenderError`.
    """
    if isinstance(skip_interpolation, str):
        skip = [skip_interpolation]
    else:
        skip = list(skip_interpolation or [])
    renderer = renderer or TemplateRenderer()

    async def render_one(path: str, files: FileSet, data: dict[str, Any]) -> None:
        if skip and match_glob(path, skip):
            return
        text = files[path].text()
        if not contains_markers(text):
            return
        try:
            rendered = await asyncio.to_thread(renderer.render_string, text, data)
        except Exception as exc:
            raise RenderError(path, exc) from exc
        files[path].contents = rendered.encode("utf-8")

    async def middleware(files: FileSet, tree: FileTree) -> None:
        data = tree.metadata()
        results = await asyncio.gather(
            *(render_one(path, files, data) for path in list(files)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    return middleware


# ---------------------------------------------------------------------------
# Completion message
# ---------------------------------------------------------------------------


def log_message(
    message: str | None,
    data: Mapping[str, Any],
    renderer: TemplateRenderer | None = None,
) -> None:
    """Render and print the template's completion message.

    Every line is indented by three spaces and preceded by a blank line.
    Rendering errors are printed to stderr and never raised.
    """
    if not message:
        return
    renderer = renderer or TemplateRenderer()
    try:
        rendered = renderer.render_string(message, data)
    except Exception as exc:
        err_console.print(
            "\n   Error when rendering template complete message: " + str(exc).strip(),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
        return
    lines = re.split(r"\r?\n", rendered)
    console.print(
        "\n" + "\n".join("   " + line for line in lines),
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )
