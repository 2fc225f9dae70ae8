"""Shared fixtures for toolstream tests."""

import pytest


@pytest.fixture
def init_file(monkeypatch, tmp_path):
    """Point config loading at a temporary init.py."""
    path = tmp_path / "init.py"
    monkeypatch.setattr("toolstream.config.get_init_script_path", lambda: path)
    return path
