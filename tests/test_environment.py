"""End-to-end tests for Environment and Template."""

import gc
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from tagsplice import (
    DictLoader,
    Environment,
    ExtendsCycleError,
    Template,
    TemplateNotFoundError,
    UndefinedError,
)
from tagsplice.environment.registry import Registry

from .conftest import assert_template_equal


class TestRenderPipeline:
    def test_extends_with_super(self) -> None:
        env = Environment(
            loader=DictLoader(
                {
                    "parent": "<a>{% block x %}P{% endblock %}</a>",
                    "child": '{% extends "parent" %}{% block x %}C-{{ super() }}{% endblock %}',
                }
            )
        )
        assert env.render("child") == "<a>C-P</a>"

    def test_extends_with_loop(self) -> None:
        env = Environment(
            loader=DictLoader(
                {
                    "base.html": "<body>{% block content %}{% endblock %}</body>",
                    "page.html": (
                        '{% extends "base.html" %}\n'
                        "{% block content %}{% for x in xs %}[{{ x }}]{% endfor %}{% endblock %}"
                    ),
                }
            )
        )
        assert env.render("page.html", xs=["a", "b"]) == "<body>[a][b]</body>"

    def test_extends_cycle(self) -> None:
        env = Environment(loader=DictLoader({"A": '{% extends "B" %}', "B": '{% extends "A" %}'}))
        with pytest.raises(ExtendsCycleError, match="extends cycle detected: A -> B -> A"):
            env.render("A")

    def test_include_cycle_degrades(self) -> None:
        env = Environment(loader=DictLoader({"a": "A{% include 'b' %}", "b": "B{% include 'a' %}"}))
        assert env.render("a") == "AB"

    def test_fixture_inheritance(self, env_with_loader: Environment) -> None:
        assert env_with_loader.render("child.html") == (
            "<html><head></head><body>Hello World</body></html>"
        )

    def test_include_inside_loop_sees_loop_variable(self, env_with_loader: Environment) -> None:
        env = env_with_loader
        out = env.from_string("<ul>{% for item in items %}{% include 'row.html' %}{% endfor %}</ul>").render(
            items=["a", "b"]
        )
        assert out == "<ul><li>a</li><li>b</li></ul>"

    def test_structural_lines_are_stripped(self) -> None:
        env = Environment(
            loader=DictLoader(
                {
                    "base": "<ul>\n{% block items %}\n{% endblock %}\n</ul>\n",
                    "child": '{% extends "base" %}\n{% block items %}\n<li>x</li>\n{% endblock %}\n',
                }
            )
        )
        assert env.render("child") == "<ul>\n<li>x</li>\n</ul>\n"

    def test_three_levels(self) -> None:
        env = Environment(
            loader=DictLoader(
                {
                    "grand": "<{% block a %}G{% endblock %}>",
                    "mid": '{% extends "grand" %}{% block a %}M{{ super() }}{% endblock %}',
                    "leaf": '{% extends "mid" %}{% block a %}L{{ super() }}{% endblock %}',
                }
            )
        )
        assert env.render("leaf") == "<LMG>"

    def test_full_page(self, env_with_loader: Environment) -> None:
        source = """
        {% extends "base.html" %}
        {% block head %}<title>{{ title | title }}</title>{% endblock %}
        {% block body %}
          {% set count = items | length %}
          <p>{{ count }} items</p>
          {% for item in items %}{% include "row.html" %}{% endfor %}
          {% if count > 2 %}<p>many</p>{% elif count %}<p>few</p>{% else %}<p>none</p>{% endif %}
        {% endblock %}
        """
        out = env_with_loader.from_string(source).render(title="my list", items=["a", "b"])
        assert_template_equal(
            out,
            "<html><head><title>My List</title></head><body> "
            "<p>2 items</p> <li>a</li><li>b</li> <p>few</p> </body></html>",
        )


class TestLoadingErrors:
    def test_missing_template(self, env_with_loader: Environment) -> None:
        with pytest.raises(TemplateNotFoundError):
            env_with_loader.render("nope.html")

    def test_missing_parent(self) -> None:
        env = Environment(loader=DictLoader({"child": '{% extends "gone" %}'}))
        with pytest.raises(TemplateNotFoundError):
            env.render("child")

    def test_no_loader(self) -> None:
        env = Environment()
        with pytest.raises(TemplateNotFoundError, match="no loader"):
            env.get_template("x")
        assert not env.read("x").ok

    def test_missing_include_warns(self, env_with_loader: Environment, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="tagsplice"):
            out = env_with_loader.from_string("[{% include 'gone.html' %}]").render()
        assert out == "[]"
        assert any(r.levelno == logging.WARNING for r in caplog.records)


class TestEnvironmentApi:
    def test_compile_does_not_run_control_flow(self) -> None:
        env = Environment(
            loader=DictLoader({"p": "{% include 'i' %}{% for x in xs %}{{ x }}{% endfor %}", "i": "I"})
        )
        assert env.compile("p") == "I{% for x in xs %}{{ x }}{% endfor %}"

    def test_get_template(self, env_with_loader: Environment) -> None:
        template = env_with_loader.get_template("partial.html")
        assert isinstance(template, Template)
        assert template.name == "partial.html"
        assert template.source == "<p>Partial content</p>"
        assert repr(template) == "<Template partial.html>"

    def test_from_string_repr(self, env: Environment) -> None:
        assert repr(env.from_string("x")) == "<Template (inline)>"

    def test_render_string_skips_structure(self, env: Environment) -> None:
        assert env.render_string("{% include 'x' %}a") == "a"

    def test_render_with_dict_and_kwargs(self, env: Environment) -> None:
        template = env.from_string("{{ a }}{{ b }}")
        assert template.render({"a": 1, "b": 2}, b=3) == "13"

    def test_context_keys_shadowing_parameters(self) -> None:
        env = Environment(loader=DictLoader({"hello.txt": "Hello, {{ name }}!"}))
        assert env.render("hello.txt", name="World") == "Hello, World!"
        assert env.render_string("{{ source }}/{{ name }}", source="db", name="n") == "db/n"
        assert env.from_string("{{ name }}").render(name="x") == "x"

    def test_render_rejects_extra_positional(self, env: Environment) -> None:
        template = env.from_string("x")
        with pytest.raises(TypeError):
            template.render({}, {})
        with pytest.raises(TypeError):
            template.render([("a", 1)])

    def test_renders_are_independent(self, env: Environment) -> None:
        template = env.from_string("{% set count = count | default(0) + 1 %}{{ count }}")
        assert template.render() == "1"
        assert template.render() == "1"
        assert template.render(count=5) == "6"

    def test_strict_mode(self, strict_env: Environment) -> None:
        with pytest.raises(UndefinedError):
            strict_env.render_string("{{ missing }}")
        assert strict_env.render_string("{{ missing | default('ok') }}") == "ok"

    def test_globals(self) -> None:
        env = Environment(globals={"site": "Docs"})
        env.add_global("year", 2026)
        assert env.render_string("{{ site }} {{ year }}") == "Docs 2026"

    def test_default_globals(self, env: Environment) -> None:
        out = env.render_string("{{ len(xs) }} {{ max(xs) }} {{ min(3, 1, 2) }} {{ dict(a=1).a }}", xs=[4, 9])
        assert out == "2 9 1 1"

    def test_registries(self, env: Environment) -> None:
        assert isinstance(env.filters, Registry)
        env.filters.update({"twice": lambda v: v * 2})
        assert env.render_string("{{ 2 | twice }}") == "4"
        del env.filters["twice"]
        assert "twice" not in env.filters
        assert "upper" in env.filters.copy()

    def test_registry_copy_on_write(self, env: Environment) -> None:
        before = env._filters
        env.add_filter("new", str)
        assert env._filters is not before
        assert "new" not in before

    def test_custom_structural_keywords(self) -> None:
        env = Environment(structural_keywords=("raw", "endraw"))
        assert env.from_string("{% raw %}\nx\n{% endraw %}\n").render() == "x\n"

    def test_repr(self, env: Environment) -> None:
        assert repr(env) == "<Environment loader=NoneType strict=False>"

    def test_template_outliving_environment(self) -> None:
        template = Environment().from_string("x")
        gc.collect()
        with pytest.raises(RuntimeError, match="garbage collected"):
            template.render()


class TestConcurrency:
    def test_parallel_renders(self, env_with_loader: Environment) -> None:
        template = env_with_loader.from_string(
            "{% set n = i * 2 %}{% for x in range(i) %}{{ x }}{% endfor %}|{{ n }}"
        )

        def work(i: int) -> str:
            return template.render(i=i)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(work, range(40)))
        for i, result in enumerate(results):
            assert result == "".join(str(x) for x in range(i)) + f"|{i * 2}"
