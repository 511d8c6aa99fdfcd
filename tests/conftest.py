"""Shared test fixtures for archgraph tests."""

from pathlib import Path

import pytest

from archgraph.config import DiagramConfig
from archgraph.gate import InMemoryFingerprintStore
from archgraph.pipeline import DiagramPipeline


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def write_tree(root: Path, files: dict) -> Path:
    """Create ``files`` (relative path -> text) under ``root``."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def tree(tmp_path):
    """Callable that writes a file tree into tmp_path and returns the root."""

    def _make(files: dict) -> Path:
        return write_tree(tmp_path, files)

    return _make


@pytest.fixture
def python_project(tmp_path):
    """Small Python package: app imports models, models defines Base/Derived."""
    return write_tree(
        tmp_path,
        {
            "src/shop/__init__.py": "",
            "src/shop/models.py": (
                "class Base:\n"
                "    name: str\n"
                "    def save(self):\n"
                "        pass\n"
                "\n"
                "class Derived(Base):\n"
                "    def load(self):\n"
                "        pass\n"
            ),
            "src/shop/app.py": (
                "from .models import Derived\n"
                "\n"
                "def main():\n"
                "    return Derived()\n"
            ),
        },
    )


@pytest.fixture
def make_pipeline():
    """Pipeline factory with an in-memory store and a fixed change set."""

    def _make(root: Path, change_set=(), store=None, **config_overrides) -> DiagramPipeline:
        config = DiagramConfig(**config_overrides)
        return DiagramPipeline(
            config,
            root,
            store=store if store is not None else InMemoryFingerprintStore(),
            change_set=lambda: list(change_set),
        )

    return _make
