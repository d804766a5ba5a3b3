"""Verifier that runs ``sha256sum -c`` on the manifest."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from stashcache_tester.manifest import BackendManifest
from stashcache_tester.verification.base import Verifier

log = logging.getLogger(__name__)


class Sha256sumConfig(BaseModel):
    """Configuration for the sha256sum verifier."""

    binary: str = "sha256sum"
    deadline: float = Field(default=600, gt=0)


@dataclass(frozen=True, kw_only=True)
class Sha256sumVerifier(Verifier):
    """Runs the checksum tool inside the directory holding the files."""

    config: Sha256sumConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: Sha256sumConfig
    ) -> AsyncGenerator["Sha256sumVerifier", None]:
        yield cls(config=config)

    async def verify(self, directory: Path, manifest_name: str) -> bool:
        try:
            process = await asyncio.create_subprocess_exec(
                self.config.binary,
                "-c",
                manifest_name,
                cwd=directory,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            log.error("Can't run %s: %s", self.config.binary, exc)
            return False

        try:
            async with asyncio.timeout(self.config.deadline):
                output, _ = await process.communicate()
        except TimeoutError:
            log.error(
                "Can't verify file hashes: %s did not finish within %gs",
                self.config.binary,
                self.config.deadline,
            )
            return False
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        if process.returncode != 0:
            log.warning(
                "Can't verify file hashes (exit status %d): %s",
                process.returncode,
                output.decode(errors="replace").strip(),
            )
            return False
        return True


sha256sum_manifest = BackendManifest(
    config_cls=Sha256sumConfig,
    factory=Sha256sumVerifier.from_config,
)
