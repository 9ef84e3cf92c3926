"""Pytest configuration and fixtures for DepGraph CLI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from depgraph_cli.analyzer import AnalysisResult, analyze_project
from depgraph_cli.entity_store import EntityStore
from depgraph_cli.models import EntityKind
from depgraph_cli.relations import RelationStore
from depgraph_cli.storage import GraphStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture(autouse=True)
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Point the config directory, config file and default DB into a temp dir."""
    home = temp_dir / "home"
    monkeypatch.setattr("depgraph_cli.config.BASE_DIR", home)
    monkeypatch.setattr("depgraph_cli.config.CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr("depgraph_cli.config.DEFAULT_DB", home / "graph.db")
    return home


@pytest.fixture
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def relations() -> RelationStore:
    return RelationStore()


@pytest.fixture
def service_store() -> EntityStore:
    """Two modules: ``app.workers`` declares Worker/Reporter, ``app.main`` uses them.

    Entity names used by the tests:
    - ``app.workers.Worker.run`` / ``app.workers.Reporter.run``
    - ``app.main.handle`` with a typed ``job`` variable and a ``self``-less body
    """
    s = EntityStore()
    pkg = s.declare(EntityKind.PACKAGE, "app")
    workers = s.declare(EntityKind.MODULE, "workers", pkg)
    worker = s.declare(EntityKind.CLASS, "Worker", workers)
    s.declare(EntityKind.METHOD, "run", worker)
    reporter = s.declare(EntityKind.CLASS, "Reporter", workers)
    s.declare(EntityKind.METHOD, "run", reporter)

    main = s.declare(EntityKind.MODULE, "main", pkg)
    s.add_import(main, "Worker", "app.workers.Worker")
    handle = s.declare(EntityKind.FUNCTION, "handle", main)
    s.declare(EntityKind.VARIABLE, "job", handle, declared_type="Worker")
    return s


@pytest.fixture
def graph_store(temp_dir: Path) -> Generator[GraphStore, None, None]:
    """Create a GraphStore with temporary storage."""
    gs = GraphStore(temp_dir / "db" / "graph.db")
    yield gs
    gs.close()


@pytest.fixture
def analyzed_sample(sample_project_path: Path) -> AnalysisResult:
    """Python half of the sample project, fully resolved."""
    return analyze_project(sample_project_path, languages=["python"])


@pytest.fixture
def sample_python_code() -> str:
    """Sample Python code for testing parser."""
    return '''"""Sample module for testing."""

import os.path
from collections import OrderedDict as OD


def hello(name: str) -> str:
    """Say hello."""
    return "Hello, " + name.strip("(.)")


class Calculator:
    """Simple calculator."""

    precision = 2

    def __init__(self, start: int = int("0")):
        self.value = start
        self.history = OD()

    def add(self, a: int, b: int) -> int:
        return a + b

    def multiply(self, a: int, b: int) -> int:
        result = self.add(a, 0)
        for _ in range(b - 1):
            result = self.add(result, a)
        return result


def run():
    calc = Calculator()
    total: Calculator = make()
    print(calc.multiply(hello("x").upper(), os.path.join("a", "b")))
'''
