from __future__ import annotations

import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
from pathlib import Path

import pytest

from tagsplice import DictLoader, Environment

BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"

TEMPLATES = {
    "minimal.html": "Hello, {{ name }}!",
    "small.html": (
        "<h1>{{ title | title }}</h1>\n"
        "<ul>\n"
        "{% for item in items %}  <li>{{ item | upper }}</li>\n{% endfor %}"
        "</ul>\n"
    ),
    "medium.html": (
        "{% set total = products | length %}"
        "<p>{{ total }} products</p>\n"
        "{% for p in products %}"
        '<div class="{{ loop.cycle(\'odd\', \'even\') }}">'
        "{{ p.name | title }}: {{ p.price | round(2) }}"
        "{% if p.stock > 10 %} in stock{% elif p.stock %} low{% else %} sold out{% endif %}"
        "</div>\n"
        "{% endfor %}"
    ),
    "layout.html": (
        "<html><head><title>{% block title %}Site{% endblock %}</title></head>\n"
        "<body>\n{% include 'nav.html' %}\n{% block content %}{% endblock %}\n</body></html>\n"
    ),
    "nav.html": "<nav>{% for link in links %}<a href=\"{{ link.url }}\">{{ link.label }}</a>{% endfor %}</nav>",
    "section.html": (
        '{% extends "layout.html" %}\n'
        "{% block title %}{{ section }} - {{ super() }}{% endblock %}\n"
        "{% block content %}<section>{% block body %}{% endblock %}</section>{% endblock %}\n"
    ),
    "complex.html": (
        '{% extends "section.html" %}\n'
        "{% block content %}<section>{% for p in products %}"
        "{% include 'card.html' %}{% endfor %}</section>{% endblock %}\n"
    ),
    "card.html": "<article>{{ p.name }} ({{ p.stock }})</article>",
}


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "tagsplice": _version("tagsplice"),
    }


def _products(count: int) -> list[dict[str, object]]:
    return [
        {"name": f"product {i}", "price": i * 1.25, "stock": i % 15}
        for i in range(count)
    ]


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)
    metadata = collect_environment_metadata()
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def tagsplice_env() -> Environment:
    return Environment(loader=DictLoader(TEMPLATES))


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return {"name": "Benchmark", "title": "small page", "items": ["alpha", "beta", "gamma", "delta", "eps"]}


@pytest.fixture(scope="session")
def medium_context() -> dict[str, object]:
    return {"products": _products(100)}


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return {"products": _products(1000)}


@pytest.fixture(scope="session")
def complex_context() -> dict[str, object]:
    return {
        "section": "Catalog",
        "products": _products(50),
        "links": [{"url": f"/p/{i}", "label": f"Page {i}"} for i in range(8)],
    }
