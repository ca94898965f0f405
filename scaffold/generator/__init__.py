"""scaffold generator -- renders a template directory into a project.

A template source directory holds a ``template/`` file tree and an optional
``meta.py`` / ``meta.json`` / ``meta.yaml`` descriptor declaring prompts,
filters, helpers and hooks.

Quick usage::

    from scaffold.generator import generate

    data = await generate(
        "my-app",
        "templates/python-lib",
        "./my-app",
        answers={"description": "A sample project"},
    )
"""

from scaffold.generator.filetree import FileTree, TemplateFile
from scaffold.generator.generator import (
    HookHelpers,
    ask_questions,
    filter_files,
    generate,
    log_message,
    render_template_files,
)
from scaffold.generator.options import Options, Prompt, load_options
from scaffold.generator.prompts import QuestionaryPrompter, ask
from scaffold.generator.templates import TemplateRenderer

__all__ = [
    "FileTree",
    "HookHelpers",
    "Options",
    "Prompt",
    "QuestionaryPrompter",
    "TemplateFile",
    "TemplateRenderer",
    "ask",
    "ask_questions",
    "filter_files",
    "generate",
    "load_options",
    "log_message",
    "render_template_files",
]
