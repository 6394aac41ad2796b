"""Shared pytest configuration for roost examples.

Provides the ``example_app`` fixture that loads a fresh App instance
from the ``app.py`` file in the same directory as the test. Each call
re-executes app.py (and its sibling modules) in an isolated namespace
against a throwaway SQLite file, so every test starts with an empty
database.
"""

import importlib.util
import sys
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Load a fresh App from the sibling app.py next to the test file."""
    app_dir = Path(request.path).parent
    monkeypatch.setenv("ROOST_DATABASE_URL", f"sqlite:///{tmp_path / 'example.db'}")
    monkeypatch.setenv("ROOST_SECRET_KEY", "example-test-secret")
    monkeypatch.syspath_prepend(str(app_dir))
    for sibling in app_dir.glob("*.py"):
        monkeypatch.delitem(sys.modules, sibling.stem, raising=False)

    app_path = app_dir / "app.py"
    module_name = f"example_{app_dir.name}"
    spec = importlib.util.spec_from_file_location(module_name, app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app
