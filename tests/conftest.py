"""Pytest configuration and fixtures for tagsplice tests."""

import pytest

from tagsplice import DictLoader, Environment
from tagsplice.render_context import RenderContext
from tagsplice.scope import Scope


@pytest.fixture
def env():
    """Create a basic tagsplice Environment."""
    return Environment()


@pytest.fixture
def strict_env():
    """Create an Environment that raises on undefined names."""
    return Environment(strict=True)


@pytest.fixture
def env_with_loader():
    """Create an Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "base.html": (
                "<html>"
                "<head>{% block head %}{% endblock %}</head>"
                "<body>{% block body %}{% endblock %}</body>"
                "</html>"
            ),
            "child.html": ('{% extends "base.html" %}{% block body %}Hello World{% endblock %}'),
            "partial.html": "<p>Partial content</p>",
            "row.html": "<li>{{ item }}</li>",
        }
    )
    return Environment(loader=loader)


@pytest.fixture
def make_ctx(env):
    """Build a RenderContext over ``env`` seeded with keyword data."""

    def _make(environment=None, **data):
        return RenderContext(environment or env, Scope(data))

    return _make


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )
