"""Template loaders for tagsplice environments.

Loaders hand template source to the Environment. Subclasses implement
`get_source(name)`, which returns the source text or raises
`TemplateNotFoundError`. The rewrite pipeline calls `read(name)` instead,
which never raises and returns a `LoadResult` carrying either the source or
the error, so a missing ``{% include %}`` can degrade to empty text while a
missing ``{% extends %}`` target is re-raised.

Built-in Loaders:
- `DictLoader`: In-memory mapping (tests, embedded templates)
- `FileSystemLoader`: One or more directories on disk
- `ChoiceLoader`: Try several loaders in order (theme fallback)
- `FunctionLoader`: Wrap a callable

Custom Loaders:
    ```python
    class DatabaseLoader(BaseLoader):
        def get_source(self, name: str) -> str:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source
    ```

Thread-Safety:
`read` may be called repeatedly and concurrently for the same name. The
built-in loaders keep no per-call state.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path

from tagsplice.environment.exceptions import TemplateNotFoundError


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of `BaseLoader.read`: exactly one of ``source``/``error`` is set."""

    source: str | None = None
    error: TemplateNotFoundError | None = None

    def __post_init__(self) -> None:
        if (self.source is None) == (self.error is None):
            raise ValueError("LoadResult needs exactly one of source or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the source, raising the stored error when the load failed."""
        if self.error is not None:
            raise self.error
        assert self.source is not None
        return self.source


class BaseLoader:
    """Base class for loaders.

    Subclasses override `get_source`. `list_templates` is optional and
    returns an empty list by default.
    """

    __slots__ = ()

    def get_source(self, name: str) -> str:
        raise TemplateNotFoundError(f"Template '{name}' not found")

    def read(self, name: str) -> LoadResult:
        """Fetch ``name`` without raising for missing or unreadable templates."""
        try:
            return LoadResult(source=self.get_source(name))
        except TemplateNotFoundError as e:
            return LoadResult(error=e)

    def list_templates(self) -> list[str]:
        return []


class DictLoader(BaseLoader):
    """Load templates from an in-memory mapping of name to source.

    Example:
            >>> loader = DictLoader({
            ...     "base.html": "<a>{% block x %}P{% endblock %}</a>",
            ...     "page.html": '{% extends "base.html" %}{% block x %}C{% endblock %}',
            ... })
            >>> Environment(loader=loader).render("page.html")
            '<a>C</a>'

    Raises:
        TemplateNotFoundError: Name not in the mapping. The message suggests
            a close match or lists available names.
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> str:
        if name not in self._mapping:
            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name]

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class FileSystemLoader(BaseLoader):
    """Load templates from one or more directories.

    Roots are searched in order; the first existing file wins. Names are
    ``/``-separated paths relative to a root. A name that resolves outside
    its root (``../secret.txt``, absolute paths) is treated as not found.

    Example:
            >>> loader = FileSystemLoader(["themes/custom", "themes/default"])
            >>> loader.get_source("pages/about.html")
    """

    __slots__ = ("_encoding", "_paths")

    def __init__(
        self,
        paths: str | Path | Iterable[str | Path],
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    @property
    def roots(self) -> list[Path]:
        return list(self._paths)

    def _resolve(self, base: Path, name: str) -> Path | None:
        root = base.resolve()
        candidate = (root / name).resolve()
        if candidate != root and root not in candidate.parents:
            return None
        return candidate

    def get_source(self, name: str) -> str:
        for base in self._paths:
            path = self._resolve(base, name)
            if path is not None and path.is_file():
                try:
                    return path.read_text(self._encoding)
                except (OSError, UnicodeDecodeError) as e:
                    raise TemplateNotFoundError(f"Template '{name}' could not be read: {e}") from e

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """All files under the search roots, as ``/``-separated relative names."""
        templates: set[str] = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob("*"):
                    if path.is_file():
                        templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class ChoiceLoader(BaseLoader):
    """Try several loaders in order and return the first match.

    Example:
            >>> loader = ChoiceLoader([
            ...     DictLoader({"nav.html": "<nav>Custom</nav>"}),
            ...     FileSystemLoader("themes/default"),
            ... ])
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Iterable[BaseLoader]):
        self._loaders = list(loaders)

    def get_source(self, name: str) -> str:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for loader in self._loaders:
            templates.update(loader.list_templates())
        return sorted(templates)


class FunctionLoader(BaseLoader):
    """Wrap a callable ``name -> source | None`` as a loader.

    Example:
            >>> def load(name):
            ...     return "Hello, {{ name }}!" if name == "greeting.txt" else None
            >>> Environment(loader=FunctionLoader(load)).render("greeting.txt", name="World")
            'Hello, World!'

    Raises:
        TemplateNotFoundError: The callable returned ``None``.
    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], str | None]):
        self._load_func = load_func

    def get_source(self, name: str) -> str:
        result = self._load_func(name)
        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        return result
