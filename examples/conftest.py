"""Fixtures for the runnable tagsplice examples.

Every example directory holds an ``app.py`` that builds an Environment and
renders at import time, plus a ``test_*.py`` that checks the output.
"""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest


@pytest.fixture
def example_dir(request: pytest.FixtureRequest) -> Path:
    """Directory of the example the requesting test belongs to."""
    return Path(request.path).parent


@pytest.fixture
def example_app(example_dir: Path) -> ModuleType:
    """Execute ``app.py`` in a fresh module so renders never leak between tests."""
    app_file = example_dir / "app.py"
    spec = importlib.util.spec_from_file_location(f"tagsplice_example_{example_dir.name}", app_file)
    if spec is None or spec.loader is None:
        pytest.fail(f"cannot import {app_file}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
