"""Verifier that checks a coreutils-style manifest in-process."""

import asyncio
import hashlib
import logging
import re
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, field_validator

from stashcache_tester.manifest import BackendManifest
from stashcache_tester.verification.base import Verifier

log = logging.getLogger(__name__)

MANIFEST_LINE = re.compile(r"^(?P<digest>[0-9a-fA-F]+) [ *](?P<name>.+)$")


class HashlibManifestConfig(BaseModel):
    """Configuration for the in-process manifest verifier."""

    algorithm: str = "sha256"

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash algorithm: {value}")
        return value


def parse_manifest(text: str) -> Sequence[tuple[str, str]]:
    """Parse ``<hexdigest>  <name>`` lines into (digest, name) pairs.

    Blank lines and ``#`` comments are skipped; a ``*`` before the name
    (binary mode marker) is accepted.

    Raises:
        ValueError: On a line that is not a checksum line

    """
    entries: list[tuple[str, str]] = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = MANIFEST_LINE.match(line.rstrip("\r"))
        if match is None:
            raise ValueError(f"Malformed manifest line {number}: {line!r}")
        entries.append((match["digest"].lower(), match["name"]))
    return entries


@dataclass(frozen=True, kw_only=True)
class HashlibManifestVerifier(Verifier):
    """Hashes each listed file with ``hashlib`` in a worker thread."""

    config: HashlibManifestConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HashlibManifestConfig
    ) -> AsyncGenerator["HashlibManifestVerifier", None]:
        yield cls(config=config)

    async def verify(self, directory: Path, manifest_name: str) -> bool:
        return await asyncio.to_thread(self._verify, directory, manifest_name)

    def _verify(self, directory: Path, manifest_name: str) -> bool:
        try:
            entries = parse_manifest((directory / manifest_name).read_text())
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            log.warning("Can't read manifest %s: %s", manifest_name, exc)
            return False

        if not entries:
            log.warning("Manifest %s lists no files", manifest_name)
            return False

        for expected, name in entries:
            relative = PurePosixPath(name)
            if relative.is_absolute() or ".." in relative.parts:
                log.warning("Manifest entry %s points outside the test set", name)
                return False
            try:
                with (directory / relative).open("rb") as handle:
                    actual = hashlib.file_digest(handle, self.config.algorithm)
            except OSError as exc:
                log.warning("Can't hash %s: %s", name, exc)
                return False
            if actual.hexdigest() != expected:
                log.warning("%s: checksum mismatch", name)
                return False
        return True


hashlib_manifest = BackendManifest(
    config_cls=HashlibManifestConfig,
    factory=HashlibManifestVerifier.from_config,
)
