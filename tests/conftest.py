"""
Pytest configuration for the classpool test suite.

Provides:
- Loguru sink cleanup between tests
- Settings cache isolation for environment-driven configuration tests
- A ``make_package`` factory writing throwaway packages to ``tmp_path`` so
  package scanning can be exercised against real imports
- An in-memory action hierarchy for provider-agnostic registry tests
"""

import importlib
import sys
import textwrap
import uuid
from pathlib import Path
from typing import Callable, Dict, List

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import pytest
from loguru import logger

from classpool import indexed
from classpool.config import reset_settings


# ============================================================================
# ISOLATION FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def _isolate_settings():
    """Re-read CLASSPOOL_* variables in every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def log_stream():
    """Collect Loguru output into a list of formatted lines."""
    lines: List[str] = []
    sink_id = logger.add(lines.append, format="{level}|{message}", level="DEBUG")
    yield lines
    logger.remove(sink_id)


# ============================================================================
# IN-MEMORY ACTION HIERARCHY
# ============================================================================

class Action:
    """Base type used by in-memory registry tests."""

    def perform(self) -> str:
        raise NotImplementedError


class Move:
    """Unrelated base type."""


@pytest.fixture
def action_base():
    return Action


@pytest.fixture
def make_action() -> Callable[..., type]:
    """Create an ``Action`` subclass, marked for discovery unless ``marked=False``."""

    def _make(name: str, marked: bool = True, base: type = Action) -> type:
        cls = type(name, (base,), {"perform": lambda self, _n=name: _n.lower()})
        return indexed(cls) if marked else cls

    return _make


# ============================================================================
# ON-DISK PACKAGES
# ============================================================================

@pytest.fixture
def make_package(tmp_path, monkeypatch) -> Callable[[Dict[str, str]], str]:
    """
    Write a uniquely named package tree and return its root package name.

    Keys of the mapping are paths relative to the root package, values the
    module source (dedented). Missing ``__init__.py`` files are created.
    Modules are purged from ``sys.modules`` after the test.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    roots: List[str] = []

    def _make(files: Dict[str, str]) -> str:
        root = f"cp_pkg_{uuid.uuid4().hex[:10]}"
        root_dir = tmp_path / root
        root_dir.mkdir()

        for relative, source in files.items():
            target = root_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(source), encoding="utf-8")

        for directory in [root_dir, *[p for p in root_dir.rglob("*") if p.is_dir()]]:
            init_file = directory / "__init__.py"
            if not init_file.exists():
                init_file.write_text("", encoding="utf-8")

        importlib.invalidate_caches()
        roots.append(root)
        return root

    yield _make

    for name in list(sys.modules):
        if any(name == root or name.startswith(root + ".") for root in roots):
            del sys.modules[name]


GAME_FILES = {
    "base.py": """
        class Action:
            created = 0

            def __init__(self):
                type(self).created += 1

            def perform(self):
                raise NotImplementedError


        class Move:
            pass
    """,
    "actions/jump.py": """
        from classpool import indexed

        from ..base import Action, Move


        @indexed
        class Jump(Action):
            created = 0

            def perform(self):
                return "jump"


        class Hidden(Action):
            created = 0


        @indexed
        class Stride(Move):
            pass
    """,
    "actions/run.py": """
        from classpool import indexed

        from ..base import Action
        from .jump import Jump


        @indexed
        class Run(Action):
            created = 0

            def perform(self):
                return "run"
    """,
    "actions/air/glide.py": """
        from classpool import indexed

        from ...base import Action


        @indexed
        class Glide(Action):
            created = 0

            def perform(self):
                return "glide"
    """,
    "moves/hop.py": """
        from classpool import indexed

        from ..base import Action


        @indexed
        class Jump(Action):
            created = 0

            def perform(self):
                return "hop-jump"


        @indexed
        class Hop(Action):
            created = 0

            def perform(self):
                return "hop"
    """,
}


@pytest.fixture
def game_package(make_package) -> str:
    """
    Root package name of a small game with ``actions`` and ``moves`` namespaces.

    Layout::

        base.py            Action, Move
        actions/jump.py    Jump (indexed), Hidden (not indexed), Stride (indexed Move)
        actions/run.py     Run (indexed); re-imports Jump
        actions/air/glide.py  Glide (indexed)
        moves/hop.py       Jump, Hop (indexed)
    """
    return make_package(GAME_FILES)


@pytest.fixture
def game_base(game_package) -> type:
    return importlib.import_module(f"{game_package}.base").Action
