"""Tests for backend loading."""

import pytest

from stashcache_tester.loading import (
    BackendNotFoundError,
    load_transfer_manifest,
    load_verifier_manifest,
)
from stashcache_tester.transfer.http import http_manifest
from stashcache_tester.transfer.xrootd import xrootd_manifest
from stashcache_tester.verification.hashlib_manifest import hashlib_manifest
from stashcache_tester.verification.sha256sum import sha256sum_manifest


@pytest.mark.parametrize(
    ("key", "expected"),
    [("xrootd", xrootd_manifest), ("http", http_manifest)],
)
def test_load_transfer_manifest(key: str, expected: object) -> None:
    """Loads transfer client manifests by key."""
    assert load_transfer_manifest(key) is expected


@pytest.mark.parametrize(
    ("key", "expected"),
    [("sha256sum", sha256sum_manifest), ("hashlib", hashlib_manifest)],
)
def test_load_verifier_manifest(key: str, expected: object) -> None:
    """Loads verifier manifests by key."""
    assert load_verifier_manifest(key) is expected


def test_unknown_transfer_client() -> None:
    """Raises BackendNotFoundError listing the available clients."""
    with pytest.raises(BackendNotFoundError) as exc_info:
        load_transfer_manifest("ftp")

    assert "ftp" in str(exc_info.value)
    assert "Available backends" in str(exc_info.value)
    assert "xrootd" in str(exc_info.value)


def test_unknown_verifier() -> None:
    """Raises BackendNotFoundError for an unknown verifier key."""
    with pytest.raises(BackendNotFoundError, match="md5sum"):
        load_verifier_manifest("md5sum")
