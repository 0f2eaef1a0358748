"""Render a directory of templates to static files.

Walks the first root of the Environment's `FileSystemLoader`, renders every
template file with the same context, and writes each result under
``out_dir`` at the same relative path. A template whose output is only
whitespace is not written, and any stale copy at the destination is
removed, so partial-only templates (layouts, includes) leave no empty files
behind.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tagsplice.environment.loaders import FileSystemLoader

if TYPE_CHECKING:
    from tagsplice.environment.core import Environment

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSIONS = frozenset(
    {".njk", ".html", ".txt", ".yaml", ".yml", ".json", ".xml", ".css", ".js"}
)


def is_template_file(path: Path) -> bool:
    return path.suffix.lower() in TEMPLATE_EXTENSIONS


def precompile_dir(env: Environment, out_dir: str | Path, /, *args: Any, **kwargs: Any) -> list[Path]:
    """Render every template file under the loader's first root into ``out_dir``.

    Args:
        env: Environment whose loader is a `FileSystemLoader`.
        out_dir: Destination directory, created if missing.
        *args, **kwargs: Render context, as for `Template.render`.

    Returns:
        Paths written, in walk order.

    Raises:
        TypeError: The Environment has no `FileSystemLoader`.
        TemplateError: A template fails to render; files written before it
            are kept.
    """
    loader = env.loader
    if not isinstance(loader, FileSystemLoader) or not loader.roots:
        raise TypeError("precompile_dir() requires an Environment with a FileSystemLoader")

    root = loader.roots[0]
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or not is_template_file(path):
            continue
        rel = path.relative_to(root).as_posix()
        rendered = env.render(rel, *args, **kwargs)
        dst = out / rel

        if not rendered.strip():
            if dst.exists():
                dst.unlink()
            logger.debug(f"Skipped '{rel}': output is empty")
            continue

        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(rendered, encoding="utf-8")
        written.append(dst)
        logger.info(f"Precompiled '{rel}' -> {dst}")

    return written
