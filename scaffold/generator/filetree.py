"""In-memory file tree with a middleware pipeline.

A ``FileTree`` reads a directory into an ordered mapping of relative path to
``TemplateFile``, runs a chain of middleware over that mapping, and writes the
result to a destination directory::

    tree = FileTree(src / "template")
    await (
        tree.use(ask_questions(prompts))
        .use(render_template_files())
        .source(".")
        .destination(dest)
        .build()
    )

Middleware are callables ``(files, tree) -> None`` (sync or async) that
mutate ``files`` in place.  They run strictly one after another.
"""

from __future__ import annotations

import asyncio
import inspect
import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union


@dataclass
class TemplateFile:
    """One file of the tree: raw contents plus its permission bits."""

    contents: bytes
    mode: int | None = None

    def text(self) -> str:
        """Contents decoded as UTF-8 (undecodable bytes are replaced)."""
        return self.contents.decode("utf-8", errors="replace")


FileSet = dict[str, TemplateFile]
Middleware = Callable[[FileSet, "FileTree"], Union[Awaitable[None], None]]


class FileTree:
    """Reader, middleware runner and writer for a template file tree.

    Attributes:
        directory: Working directory; ``source`` and ``destination`` are
            resolved against it.
        plugins: Registered middleware, in execution order.
        files: The file set of the last :meth:`build` (empty before).
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.plugins: list[Middleware] = []
        self.files: FileSet = {}
        self._metadata: dict[str, Any] = {}
        self._source = "src"
        self._destination = "build"
        self._clean = True

    # -- Configuration (chainable) -----------------------------------------

    def use(self, plugin: Middleware) -> "FileTree":
        """Append *plugin* to the middleware chain."""
        self.plugins.append(plugin)
        return self

    def source(self, path: str | Path) -> "FileTree":
        self._source = str(path)
        return self

    def destination(self, path: str | Path) -> "FileTree":
        self._destination = str(path)
        return self

    def clean(self, flag: bool) -> "FileTree":
        """Whether :meth:`build` removes the destination before writing."""
        self._clean = flag
        return self

    def metadata(self, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Return the shared metadata dict, merging *data* into it first.

        The same dict object is returned on every call.
        """
        if data:
            self._metadata.update(data)
        return self._metadata

    @property
    def source_path(self) -> Path:
        return self.directory / self._source

    @property
    def destination_path(self) -> Path:
        return self.directory / self._destination

    # -- Pipeline ----------------------------------------------------------

    async def read(self, path: str | Path | None = None) -> FileSet:
        """Load every regular file under *path* (default: the source)."""
        root = Path(path) if path is not None else self.source_path
        return await asyncio.to_thread(_read_tree, root)

    async def run(self, files: FileSet) -> FileSet:
        """Run every middleware against *files*, one after another."""
        for plugin in self.plugins:
            result = plugin(files, self)
            if inspect.isawaitable(result):
                await result
        return files

    async def write(self, files: FileSet, path: str | Path | None = None) -> None:
        """Write *files* under *path* (default: the destination).

        Writes are best-effort: a failure part-way leaves the files written
        so far in place.
        """
        root = Path(path) if path is not None else self.destination_path
        await asyncio.to_thread(_write_tree, root, files)

    async def build(self) -> FileSet:
        """Read, transform and write the tree.  Returns the final file set."""
        if self._clean:
            await asyncio.to_thread(_remove_tree, self.destination_path)
        files = await self.read()
        self.files = files
        await self.run(files)
        await self.write(files)
        return files


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _read_tree(root: Path) -> FileSet:
    """Synchronous helper: read *root* into an ordered file set."""
    if not root.is_dir():
        raise FileNotFoundError(f"Template directory does not exist: {root}")
    files: FileSet = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(root).as_posix()
        files[rel] = TemplateFile(
            contents=path.read_bytes(),
            mode=path.stat().st_mode & 0o777,
        )
    return files


def _write_tree(root: Path, files: FileSet) -> None:
    """Synchronous helper: create parent dirs and write every file."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, entry in files.items():
        out = root / rel
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(entry.contents)
        if entry.mode is not None:
            out.chmod(entry.mode)


def _remove_tree(root: Path) -> None:
    if root.is_dir():
        shutil.rmtree(root)
