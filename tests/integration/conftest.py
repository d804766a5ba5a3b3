"""Fixtures for integration tests."""

import stat
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls


@pytest.fixture
def aioresponses() -> Iterator[aioresponses_cls]:
    """Intercept aiohttp requests for the duration of a test."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a function that writes executable shell scripts."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return script

    return _make
