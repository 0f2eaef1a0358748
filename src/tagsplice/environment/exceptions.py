"""Exceptions for the tagsplice template engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Loader could not provide the template
├── TemplateSyntaxError       # Malformed tag delimiters (scanner)
├── TemplateRuntimeError      # Expression/directive failure during rewrite
├── ExtendsCycleError         # A extends B extends A
└── UndefinedError            # Undefined variable (strict mode only)

Error Messages:
Every exception carries a searchable `ErrorCode`. Syntax and runtime errors
show the template name, the 1-based line, and a snippet of the offending
source line when the source is available:

    ```
    Syntax Error: Unterminated tag: '{%' opened at 3:4 is still open
      --> page.html:3:12
       |
      3 | <p>{% if x <b>{{ y }}</b></p>
       |             ^
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from tagsplice.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: SCN (scanner), STR (structure), RUN (runtime), TPL (loading)
    """

    # Scanner errors (T-SCN-xxx)
    UNEXPECTED_CLOSE = "T-SCN-001"
    UNTERMINATED_TAG = "T-SCN-002"
    MISMATCHED_DELIMITER = "T-SCN-003"
    UNCLOSED_TAG = "T-SCN-004"

    # Structural errors (T-STR-xxx)
    EXTENDS_CYCLE = "T-STR-001"

    # Runtime errors (T-RUN-xxx)
    UNDEFINED_VARIABLE = "T-RUN-001"
    INVALID_EXPRESSION = "T-RUN-002"
    UNKNOWN_FILTER = "T-RUN-003"
    UNKNOWN_TEST = "T-RUN-004"
    NOT_CALLABLE = "T-RUN-005"
    RUNTIME_ERROR = "T-RUN-006"

    # Template loading errors (T-TPL-xxx)
    TEMPLATE_NOT_FOUND = "T-TPL-001"
    SYNTAX_ERROR = "T-TPL-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'scanner', 'structure', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "SCN": "scanner",
            "STR": "structure",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional 0-based column for a caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in diagnostic style, colored when supported."""
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
            if lineno == self.error_line and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('     |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all tagsplice template errors.

        >>> try:
        ...     env.render("page.html", user=user)
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen summary without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by the configured loader.

    Raised for the entry template and for ``{% extends %}`` targets. Missing
    ``{% include %}`` targets never raise; they render as empty text.
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Malformed tag delimiters found while scanning.

    When ``source`` and ``lineno`` are provided, the message includes the
    offending line with a caret under ``col_offset``.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self._location()}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = f"\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        return f"{code_prefix}{self.message}\n  --> {self._location()}"


class TemplateRuntimeError(TemplateError):
    """Failure while evaluating an expression or directive.

    Output Format:
            ```
            Runtime Error: Unknown filter 'uper'
              Location: page.html:4
              Expression: {{ name | uper }}
              Suggestion: Did you mean 'upper'?
            ```

    Attributes:
        message: Error description
        expression: Tag text that failed
        template_name: Name of the template being rendered
        lineno: 1-based line of the tag
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def with_location(
        self,
        *,
        template_name: str | None,
        lineno: int | None,
        expression: str | None = None,
        source: str | None = None,
    ) -> TemplateRuntimeError:
        """Return a copy annotated with template position, keeping known fields."""
        if self.template_name is not None and self.lineno is not None:
            return self
        snippet = self.source_snippet
        if snippet is None and source and lineno:
            snippet = build_source_snippet(source, lineno)
        return type(self)._rebuild(
            self,
            template_name=self.template_name or template_name,
            lineno=self.lineno or lineno,
            expression=self.expression or expression,
            source_snippet=snippet,
        )

    @classmethod
    def _rebuild(cls, original: TemplateRuntimeError, **changes: Any) -> TemplateRuntimeError:
        fields: dict[str, Any] = {
            "expression": original.expression,
            "values": original.values,
            "template_name": original.template_name,
            "lineno": original.lineno,
            "suggestion": original.suggestion,
            "source_snippet": original.source_snippet,
            "code": original.code,
        }
        fields.update(changes)
        return TemplateRuntimeError(original.message, **fields)

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  Location: {terminal.location(loc)}",
        ]
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class ExtendsCycleError(TemplateError):
    """An ``{% extends %}`` chain leads back to a template already in it.

    Attributes:
        chain: Template names in visiting order, ending with the repeated name.
    """

    code: ErrorCode | None = ErrorCode.EXTENDS_CYCLE

    def __init__(self, chain: list[str]):
        self.chain = list(chain)
        super().__init__(f"extends cycle detected: {' -> '.join(self.chain)}")


class UndefinedError(TemplateError):
    """Raised when a strict Environment looks up an undefined variable.

    Non-strict environments (the default) render undefined values as empty
    text instead. When ``available_names`` is given, a "Did you mean?"
    suggestion is added for close matches.
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
    ):
        self.name = name
        self.template = template or "<template>"
        self.lineno = lineno
        self._available_names = available_names
        super().__init__(self._format_message())

    def with_location(self, *, template_name: str | None, lineno: int | None) -> UndefinedError:
        """Return a copy carrying template position, keeping known fields."""
        if self.lineno is not None:
            return self
        return UndefinedError(
            self.name,
            template_name,
            lineno,
            available_names=self._available_names,
        )

    def _format_message(self) -> str:
        location = self.template
        if self.lineno:
            location += f":{self.lineno}"
        msg = f"Undefined variable '{self.name}' in {terminal.location(location)}"

        if self._available_names:
            from difflib import get_close_matches

            matches = get_close_matches(self.name, self._available_names, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{terminal.suggestion(matches[0])}'?"

        hint_text = f"Use {{{{ {self.name} | default('') }}}} for optional variables"
        msg += f"\n  {terminal.hint('Hint:')} {hint_text}"
        return msg
