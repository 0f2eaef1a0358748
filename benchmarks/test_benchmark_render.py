"""Template rendering benchmarks.

Template sizes:
- "minimal": single variable
- "small": loop over 5 strings with filters
- "medium": 100 items with loop helpers, filters and if/elif/else
- "large": the medium template over 1000 items
- "complex": three-level inheritance with includes inside a loop

Run with: pytest benchmarks/test_benchmark_render.py --benchmark-only
Compare: pytest benchmarks/test_benchmark_render.py --benchmark-compare
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tagsplice import Environment

if TYPE_CHECKING:
    from pytest_benchmark.fixture import BenchmarkFixture


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal(benchmark: BenchmarkFixture, tagsplice_env: Environment) -> None:
    template = tagsplice_env.get_template("minimal.html")
    result = benchmark(template.render, name="Benchmark")
    assert result == "Hello, Benchmark!"


@pytest.mark.benchmark(group="render:small")
def test_render_small(
    benchmark: BenchmarkFixture, tagsplice_env: Environment, small_context: dict[str, object]
) -> None:
    template = tagsplice_env.get_template("small.html")
    result = benchmark(template.render, small_context)
    assert "<li>ALPHA</li>" in result


@pytest.mark.benchmark(group="render:medium")
def test_render_medium(
    benchmark: BenchmarkFixture, tagsplice_env: Environment, medium_context: dict[str, object]
) -> None:
    template = tagsplice_env.get_template("medium.html")
    result = benchmark(template.render, medium_context)
    assert result.startswith("<p>100 products</p>")


@pytest.mark.benchmark(group="render:large")
def test_render_large(
    benchmark: BenchmarkFixture, tagsplice_env: Environment, large_context: dict[str, object]
) -> None:
    template = tagsplice_env.get_template("medium.html")
    result = benchmark(template.render, large_context)
    assert result.count("<div") == 1000


@pytest.mark.benchmark(group="render:complex")
def test_render_complex(
    benchmark: BenchmarkFixture, tagsplice_env: Environment, complex_context: dict[str, object]
) -> None:
    template = tagsplice_env.get_template("complex.html")
    result = benchmark(template.render, complex_context)
    assert "<title>Catalog - Site</title>" in result
    assert result.count("<article>") == 50


@pytest.mark.benchmark(group="compile:complex")
def test_compile_complex(benchmark: BenchmarkFixture, tagsplice_env: Environment) -> None:
    """Structural resolution alone: includes, extends and line stripping."""
    resolved = benchmark(tagsplice_env.compile, "complex.html")
    assert "{% extends" not in resolved


@pytest.mark.benchmark(group="render:end-to-end")
def test_load_and_render_complex(
    benchmark: BenchmarkFixture, tagsplice_env: Environment, complex_context: dict[str, object]
) -> None:
    benchmark(tagsplice_env.render, "complex.html", complex_context)
