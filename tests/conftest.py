# File: tests/conftest.py
# Contains pytest fixtures shared by the test modules.

import logging
from pathlib import Path
from typing import Any, Generator

import pytest
import yaml


@pytest.fixture(autouse=True)
def quiet_generator_logs(caplog):
    """Keep generator logs at WARNING unless a test asks for more."""
    caplog.set_level(logging.WARNING, logger="drizzle_auto_generator")
    yield


@pytest.fixture
def test_output_dir(tmp_path) -> Generator[Path, Any, Any]:
    """Provides a fresh output directory for one test."""
    output_dir = tmp_path / "generated_drizzle"
    print(f"\nUsing test output directory: {output_dir}")
    yield output_dir


@pytest.fixture
def write_yaml(tmp_path):
    """Writes a mapping to a YAML file under the test's temporary directory."""

    def _write(name: str, content: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(content, f, sort_keys=False)
        return path

    return _write
