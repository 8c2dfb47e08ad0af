"""Pytest configuration and shared fixtures for the readbin test suite."""

import logging
from pathlib import Path
from typing import Generator

import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None, None, None]:
    """Undo handler changes made by ``configure_logging`` during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        # pytest capture handlers subclass StreamHandler and are left alone
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def binary_file(tmp_path: Path) -> Path:
    """Provide an existing input file standing in for an executable.

    Returns
    -------
    Path
        Path of a small file named ``ls``

    """
    path = tmp_path / "ls"
    path.write_bytes(b"\x7fELF\x02\x01\x01\x00")
    return path


@pytest.fixture
def signatures_file(tmp_path: Path) -> Path:
    """Provide an existing byteweight signature file."""
    path = tmp_path / "sigs.zip"
    path.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
    return path
