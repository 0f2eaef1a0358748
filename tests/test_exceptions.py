"""Tests for error types, codes and formatting."""

import pytest

from tagsplice import DictLoader, Environment
from tagsplice.environment import terminal
from tagsplice.environment.exceptions import (
    ErrorCode,
    ExtendsCycleError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)


class TestErrorCodes:
    def test_categories(self) -> None:
        assert ErrorCode.UNCLOSED_TAG.category == "scanner"
        assert ErrorCode.EXTENDS_CYCLE.category == "structure"
        assert ErrorCode.UNKNOWN_FILTER.category == "runtime"
        assert ErrorCode.TEMPLATE_NOT_FOUND.category == "template"

    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_class_defaults(self) -> None:
        assert TemplateNotFoundError("x").code is ErrorCode.TEMPLATE_NOT_FOUND
        assert ExtendsCycleError(["a", "a"]).code is ErrorCode.EXTENDS_CYCLE
        assert UndefinedError("x").code is ErrorCode.UNDEFINED_VARIABLE

    def test_everything_is_a_template_error(self) -> None:
        for cls in (TemplateNotFoundError, TemplateSyntaxError, TemplateRuntimeError):
            assert issubclass(cls, TemplateError)


class TestExtendsCycleError:
    def test_message_lists_chain(self) -> None:
        err = ExtendsCycleError(["A", "B", "A"])
        assert str(err) == "extends cycle detected: A -> B -> A"
        assert err.chain == ["A", "B", "A"]


class TestSourceSnippet:
    def test_context_window(self) -> None:
        source = "\n".join(f"line {i}" for i in range(1, 8))
        snippet = build_source_snippet(source, 4, context_lines=1)
        assert [n for n, _ in snippet.lines] == [3, 4, 5]
        assert snippet.error_line == 4

    def test_window_clamped_at_start(self) -> None:
        snippet = build_source_snippet("a\nb", 1)
        assert [n for n, _ in snippet.lines] == [1, 2]

    def test_format_marks_error_line(self) -> None:
        snippet = build_source_snippet("a\nb\nc", 2, column=0)
        text = terminal.strip_colors(snippet.format())
        assert ">  2 | b" in text
        assert "^" in text


class TestTemplateSyntaxError:
    def test_message_has_snippet_and_caret(self) -> None:
        err = TemplateSyntaxError(
            "Unclosed tag", lineno=2, name="page.html", source="a\n{{ b", col_offset=0
        )
        text = str(err)
        assert "--> page.html:2:0" in text
        assert "  2 | {{ b" in text
        assert "   | ^" in text

    def test_format_compact(self) -> None:
        err = TemplateSyntaxError(
            "Unclosed tag", lineno=1, name="p", code=ErrorCode.UNCLOSED_TAG
        )
        assert err.format_compact().startswith("T-SCN-004: Unclosed tag")


class TestTemplateRuntimeError:
    def test_with_location_fills_missing_fields(self) -> None:
        err = TemplateRuntimeError("boom", expression="x | f")
        located = err.with_location(template_name="p.html", lineno=3, source="a\nb\nc\nd")
        assert located is not err
        assert located.template_name == "p.html"
        assert located.lineno == 3
        assert located.expression == "x | f"
        assert located.source_snippet is not None
        assert "p.html:3" in terminal.strip_colors(str(located))

    def test_with_location_keeps_existing_location(self) -> None:
        err = TemplateRuntimeError("boom", template_name="inner.html", lineno=1)
        assert err.with_location(template_name="outer.html", lineno=9) is err

    def test_with_location_keeps_code(self) -> None:
        err = TemplateRuntimeError("boom", code=ErrorCode.UNKNOWN_FILTER)
        located = err.with_location(template_name="p", lineno=1)
        assert located.code is ErrorCode.UNKNOWN_FILTER

    def test_suggestion_in_message(self) -> None:
        err = TemplateRuntimeError("Unknown filter 'uper'", suggestion="Did you mean 'upper'?")
        assert "Did you mean 'upper'?" in terminal.strip_colors(str(err))

    def test_values_are_truncated(self) -> None:
        err = TemplateRuntimeError("boom", values={"big": "x" * 200})
        line = next(l for l in str(err).splitlines() if "big =" in l)
        assert "..." in line
        assert "(str)" in line

    def test_format_compact(self) -> None:
        err = TemplateRuntimeError(
            "boom", template_name="p.html", lineno=2, code=ErrorCode.NOT_CALLABLE
        )
        compact = terminal.strip_colors(err.format_compact())
        assert compact.startswith("T-RUN-005: boom")
        assert "p.html:2" in compact


class TestUndefinedError:
    def test_message_and_hint(self) -> None:
        text = terminal.strip_colors(str(UndefinedError("usr", "p.html", 4)))
        assert "Undefined variable 'usr' in p.html:4" in text
        assert "default('')" in text

    def test_did_you_mean(self) -> None:
        err = UndefinedError("usr", available_names=frozenset({"user", "title"}))
        assert "Did you mean 'user'?" in terminal.strip_colors(str(err))

    def test_with_location(self) -> None:
        err = UndefinedError("x")
        located = err.with_location(template_name="p.html", lineno=2)
        assert located.template == "p.html"
        assert located.lineno == 2
        assert located.with_location(template_name="q", lineno=5) is located


class TestErrorsFromRendering:
    """Errors raised during a render carry the template position."""

    def test_runtime_error_is_located(self) -> None:
        env = Environment(loader=DictLoader({"page.html": "line1\n{{ x | nope }}"}))
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("page.html", x=1)
        err = exc_info.value
        assert err.code is ErrorCode.UNKNOWN_FILTER
        assert err.template_name == "page.html"
        assert err.lineno == 2

    def test_undefined_error_is_located(self) -> None:
        env = Environment(loader=DictLoader({"page.html": "a\n\n{{ missing }}"}), strict=True)
        with pytest.raises(UndefinedError) as exc_info:
            env.render("page.html")
        assert exc_info.value.template == "page.html"
        assert exc_info.value.lineno == 3

    def test_directive_exception_is_wrapped(self) -> None:
        env = Environment()

        def explode(rest, scope):
            raise ValueError("bad input")

        env.add_directive("explode", explode)
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render_string("{% explode now %}")
        assert "ValueError: bad input" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_syntax_error_from_render(self) -> None:
        env = Environment()
        with pytest.raises(TemplateSyntaxError):
            env.render_string("{{ unclosed")
