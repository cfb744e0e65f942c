"""Shared fixtures for impact-tree tests."""

from pathlib import Path

import pytest


@pytest.fixture
def make_project(tmp_path):
    """Write a project from a {relative_path: content} mapping.

    Returns the resolved project root.
    """
    def _make(files: dict) -> Path:
        root = tmp_path.resolve()
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make
