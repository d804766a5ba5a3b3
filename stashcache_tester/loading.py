"""Loading of transfer clients and verifiers from entry points."""

from importlib.metadata import entry_points
from typing import Any

from stashcache_tester.manifest import BackendManifest
from stashcache_tester.transfer.base import TransferClient
from stashcache_tester.verification.base import Verifier

TRANSFER_CLIENT_GROUP = "stashcache_tester.transfer_clients"
VERIFIER_GROUP = "stashcache_tester.verifiers"


class BackendNotFoundError(Exception):
    """Raised when no plugin is registered under the requested key."""


def load_transfer_manifest(key: str) -> BackendManifest[Any, TransferClient]:
    """Load a transfer client manifest by key (e.g. "xrootd", "http")."""
    return _load_manifest(TRANSFER_CLIENT_GROUP, key)


def load_verifier_manifest(key: str) -> BackendManifest[Any, Verifier]:
    """Load a verifier manifest by key (e.g. "sha256sum", "hashlib")."""
    return _load_manifest(VERIFIER_GROUP, key)


def _load_manifest(group: str, key: str) -> BackendManifest[Any, Any]:
    """Look ``key`` up in an entry point group.

    Raises:
        BackendNotFoundError: If nothing is registered under ``key``

    """
    entries = entry_points(group=group)

    for entry in entries:
        if entry.name == key:
            manifest: BackendManifest[Any, Any] = entry.load()
            return manifest

    available = sorted(e.name for e in entries)
    raise BackendNotFoundError(
        f"Backend '{key}' not found in {group}. Available backends: {available}"
    )
