"""Test configuration and fixtures for treegen."""

from pathlib import Path

import pytest

from treegen.directory_lister import DirectoryEntry


def pytest_addoption(parser):
    """Add custom command-line options for tests."""
    parser.addoption("--run-cli-tests", action="store_true", default=False, help="Run CLI integration tests (slow)")


class MemoryLister:
    """Directory lister over an in-memory mapping of directory paths to entries."""

    def __init__(self, tree):
        self.tree = tree
        self.calls = []

    def list_dir(self, path):
        key = Path(path).as_posix()
        self.calls.append(key)
        return [DirectoryEntry(name, is_dir) for name, is_dir in self.tree[key]]


@pytest.fixture
def lister_factory():
    """Build a MemoryLister from a mapping of directory paths to entries."""
    return MemoryLister


@pytest.fixture
def memory_lister():
    """A lister describing a small project rooted at ``project``."""
    return MemoryLister(
        {
            "project": [("README.md", False), ("docs", True), ("src", True)],
            "project/docs": [("guide.md", False)],
            "project/src": [("app.py", False), ("app.log", False), ("lib", True)],
            "project/src/lib": [],
        }
    )


@pytest.fixture
def project_dir(tmp_path):
    """Create a small project on disk."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "utils").mkdir()
    (tmp_path / "docs").mkdir()
    (tmp_path / "build").mkdir()

    (tmp_path / "README.md").write_text("# Project\n")
    (tmp_path / "server.log").write_text("DEBUG\n")
    (tmp_path / "src" / "main.py").write_text("print('hello')\n")
    (tmp_path / "src" / "main.pyc").write_bytes(b"compiled")
    (tmp_path / "src" / "utils" / "helpers.py").write_text("def helper():\n    pass\n")
    (tmp_path / "docs" / "index.md").write_text("# Docs\n")
    (tmp_path / "build" / "out.js").write_text("console.log('x')\n")

    return tmp_path
