"""
Test Configuration and Fixtures
===============================

This module provides pytest fixtures for testing cortex: a rules source tree,
a target project and ready-made installations and engines.
"""

from pathlib import Path

import pytest

from cortex.core.sync import RuleSyncEngine
from cortex.environment import reset_settings
from cortex.source import RuleSource
from cortex.utils.paths import Installation

SOURCE_FILES = {
    "general/style.md": "---\nscope: all\n# not a heading\n---\n# Code Style\n\nKeep functions small.\n",
    "general/naming.md": "# Naming Conventions\n\nUse descriptive names.\n",
    "golang/errors.md": "# Error Handling in Go\n\nWrap errors with context.\n",
    "python/typing.md": "# Type Hints\n\nAnnotate public functions.\n",
    "python/testing.md": "Plain notes without a heading.\n",
    "rust/ownership.md": "# Ownership\n",
    "starter/settings.json.example": '{"theme": "dark"}\n',
    "starter/.gitignore.example": "settings.local.json\n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under ``root`` to its bytes."""
    return {str(path.relative_to(root)): path.read_bytes() for path in sorted(root.rglob("*")) if path.is_file()}


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a throwaway home directory for every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("CORTEX_HOME", str(home))
    monkeypatch.delenv("CORTEX_REPO", raising=False)
    for name in ("CORTEX_DEBUG", "CORTEX_LOG_LEVEL", "CORTEX_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield home
    reset_settings()


@pytest.fixture
def home(isolated_settings: Path) -> Path:
    return isolated_settings


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A rules source with general, golang, python and rust categories."""
    return write_tree(tmp_path / "source", SOURCE_FILES)


@pytest.fixture
def rule_source(source_dir: Path) -> RuleSource:
    return RuleSource(source_dir)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A target project containing Go and Python marker files."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "go.mod").write_text("module example.com/demo\n")
    (root / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
    return root


@pytest.fixture
def installation(project: Path) -> Installation:
    return Installation.for_project(project)


@pytest.fixture
def make_engine(installation: Installation, rule_source: RuleSource):
    """Build engines for the project installation with the given flags."""

    def _make(force: bool = False, dry_run: bool = False, source: RuleSource | None = None) -> RuleSyncEngine:
        return RuleSyncEngine(installation, source or rule_source, force=force, dry_run=dry_run)

    return _make
