"""Transfer client that shells out to xrdcp."""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from stashcache_tester.transfer.base import (
    TransferClient,
    TransferInvocation,
    TransportTuning,
    local_name,
)
from stashcache_tester.transfer.xrootd.config import XRootDConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class XRootDClient(TransferClient):
    """Fetches files with ``xrdcp <uri> <directory>``."""

    config: XRootDConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: XRootDConfig
    ) -> AsyncGenerator["XRootDClient", None]:
        """Create a client; xrdcp holds no state between transfers."""
        yield cls(config=config)

    def remote_uri(self, endpoint_address: str, remote_path: str) -> str:
        return f"root://{endpoint_address}/{remote_path}"

    async def invoke(
        self,
        remote_uri: str,
        destination: Path,
        tuning: TransportTuning,
        deadline: float,
    ) -> TransferInvocation:
        """Run xrdcp, killing it if the caller cancels the transfer."""
        local_path = destination / local_name(remote_uri)
        process = await asyncio.create_subprocess_exec(
            self.config.binary,
            *self.config.extra_args,
            remote_uri,
            str(destination),
            env={**os.environ, **tuning.as_env()},
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                log.info("Killing xrdcp for %s (pid %d)", remote_uri, process.pid)
                process.kill()
            await process.wait()
            raise

        returncode = process.returncode if process.returncode is not None else -1
        if returncode != 0:
            detail = stderr.decode(errors="replace").strip() or None
            return TransferInvocation(
                exit_status=returncode,
                local_path=local_path,
                detail=(
                    f"xrdcp exited with status {returncode}: {detail}"
                    if detail
                    else f"xrdcp exited with status {returncode}"
                ),
            )
        return TransferInvocation(exit_status=0, local_path=local_path)
