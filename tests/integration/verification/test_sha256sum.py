"""Integration tests for the sha256sum verifier."""

import hashlib
import shutil
from pathlib import Path

import pytest

from stashcache_tester.verification.sha256sum import Sha256sumConfig, Sha256sumVerifier

pytestmark = pytest.mark.skipif(
    shutil.which("sha256sum") is None, reason="sha256sum not installed"
)


@pytest.fixture
def test_set_dir(tmp_path: Path) -> Path:
    """Directory holding two files and a matching manifest."""
    lines = []
    for name, data in [("file1.dat", b"first"), ("file2.dat", b"second")]:
        (tmp_path / name).write_bytes(data)
        lines.append(f"{hashlib.sha256(data).hexdigest()}  {name}\n")
    (tmp_path / "hashes").write_text("".join(lines))
    return tmp_path


async def test_matching_manifest_verifies(test_set_dir: Path) -> None:
    """All checksums matching verifies the set."""
    verifier = Sha256sumVerifier(config=Sha256sumConfig())

    assert await verifier.verify(test_set_dir, "hashes")


async def test_mismatch_fails(test_set_dir: Path) -> None:
    """A corrupted file fails verification."""
    (test_set_dir / "file2.dat").write_bytes(b"corrupted")
    verifier = Sha256sumVerifier(config=Sha256sumConfig())

    assert not await verifier.verify(test_set_dir, "hashes")


async def test_missing_file_fails(test_set_dir: Path) -> None:
    """A listed file that was never downloaded fails verification."""
    (test_set_dir / "file1.dat").unlink()
    verifier = Sha256sumVerifier(config=Sha256sumConfig())

    assert not await verifier.verify(test_set_dir, "hashes")


async def test_missing_binary_fails(test_set_dir: Path) -> None:
    """A checksum tool that cannot be started fails verification."""
    verifier = Sha256sumVerifier(
        config=Sha256sumConfig(binary=str(test_set_dir / "no-such-tool"))
    )

    assert not await verifier.verify(test_set_dir, "hashes")


async def test_from_config_yields_verifier() -> None:
    """The plugin factory yields a configured verifier."""
    config = Sha256sumConfig(deadline=5)

    async with Sha256sumVerifier.from_config(config) as verifier:
        assert verifier.config is config
