"""Transfer client that streams files over HTTP with aiohttp."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from stashcache_tester.transfer.base import (
    TransferClient,
    TransferError,
    TransferInvocation,
    TransportTuning,
    local_name,
)
from stashcache_tester.transfer.http.config import HttpTransferConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HttpTransferClient(TransferClient):
    """Fetches files with HTTP GET, streaming the body to disk.

    Non-200 responses are reported with the HTTP status as exit status.
    """

    config: HttpTransferConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HttpTransferConfig
    ) -> AsyncGenerator["HttpTransferClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession() as session:
            yield cls(config=config, session=session)

    def remote_uri(self, endpoint_address: str, remote_path: str) -> str:
        authority = endpoint_address
        if self.config.port is not None and ":" not in endpoint_address:
            authority = f"{endpoint_address}:{self.config.port}"
        return f"{self.config.scheme}://{authority}/{remote_path.lstrip('/')}"

    async def invoke(
        self,
        remote_uri: str,
        destination: Path,
        tuning: TransportTuning,
        deadline: float,
    ) -> TransferInvocation:
        """Download ``remote_uri`` in ``tuning.chunk_size`` pieces."""
        local_path = destination / local_name(remote_uri)
        timeout = aiohttp.ClientTimeout(
            total=deadline,
            connect=tuning.connection_window,
            sock_read=tuning.stream_timeout,
        )
        try:
            async with self.session.get(remote_uri, timeout=timeout) as response:
                if response.status != 200:
                    log.info("GET %s returned %d", remote_uri, response.status)
                    reason = response.reason or ""
                    return TransferInvocation(
                        exit_status=response.status,
                        local_path=local_path,
                        detail=f"HTTP {response.status} {reason}".strip(),
                    )
                handle = await asyncio.to_thread(local_path.open, "wb")
                try:
                    async for chunk in response.content.iter_chunked(tuning.chunk_size):
                        await asyncio.to_thread(handle.write, chunk)
                finally:
                    await asyncio.to_thread(handle.close)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TransferError(f"HTTP transfer failed: {exc!r}") from exc

        return TransferInvocation(exit_status=0, local_path=local_path)
