"""Precompile -- render a whole directory of templates to static files.

Every template under the loader's root is rendered with one shared
context and written to the output directory at the same relative path.
Templates that render to whitespace only (like ``_macros.txt``) are not
written.

Run:
    python app.py [OUT_DIR]
"""

import logging
import sys
import tempfile
from pathlib import Path

from tagsplice import Environment, FileSystemLoader

site_dir = Path(__file__).parent / "site"
env = Environment(loader=FileSystemLoader(site_dir))

context = {
    "site_name": "Static Blog",
    "posts": [
        {"slug": "first", "title": "First Post"},
        {"slug": "second", "title": "Second Post"},
    ],
}


def build(out_dir: Path) -> list[Path]:
    return env.precompile_dir(out_dir, context)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    out_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(tempfile.mkdtemp())
    for path in build(out_dir):
        print(path)


if __name__ == "__main__":
    main()
