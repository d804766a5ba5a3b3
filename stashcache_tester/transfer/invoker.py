"""Transfer invoker: runs one timed, deadline-bounded file transfer."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from stashcache_tester.models.result import TransferOutcome
from stashcache_tester.transfer.base import (
    TransferClient,
    TransferError,
    TransportTuning,
    local_name,
)

log = logging.getLogger(__name__)

DEFAULT_DEADLINE = 600.0


@dataclass(frozen=True, kw_only=True)
class TransferInvoker:
    """Wraps a transfer client and turns every call into a TransferOutcome."""

    client: TransferClient
    tuning: TransportTuning = field(default_factory=TransportTuning)
    deadline: float = DEFAULT_DEADLINE

    async def fetch(
        self,
        endpoint_address: str,
        remote_path: str,
        destination: Path,
        deadline: float | None = None,
    ) -> TransferOutcome:
        """Download one file from an endpoint into ``destination``.

        Never raises: transport errors, deadline expiry and a missing local
        file are all reported as a failed outcome.
        """
        budget = self.deadline if deadline is None else deadline
        remote_uri = self.client.remote_uri(endpoint_address, remote_path)
        local_path = destination / local_name(remote_uri)
        started_at = datetime.now(timezone.utc)

        try:
            async with asyncio.timeout(budget):
                invocation = await self.client.invoke(
                    remote_uri, destination, self.tuning, budget
                )
        except TimeoutError:
            return self._failure(
                remote_uri,
                local_path,
                started_at,
                f"Can't download {remote_uri}: deadline of {budget:g}s exceeded",
            )
        except (TransferError, OSError) as exc:
            return self._failure(
                remote_uri,
                local_path,
                started_at,
                f"Can't download {remote_uri}: {exc}",
            )

        if invocation.exit_status != 0:
            detail = invocation.detail or f"exit status {invocation.exit_status}"
            return self._failure(
                remote_uri,
                invocation.local_path,
                started_at,
                f"Can't download {remote_uri}: {detail}",
                exit_status=invocation.exit_status,
            )

        ended_at = datetime.now(timezone.utc)
        try:
            size = invocation.local_path.stat().st_size
        except OSError as exc:
            return self._failure(
                remote_uri,
                invocation.local_path,
                started_at,
                f"Can't stat file {invocation.local_path.name}: {exc}",
                exit_status=invocation.exit_status,
                ended_at=ended_at,
            )

        log.debug("Downloaded %s (%d bytes)", remote_uri, size)
        return TransferOutcome(
            success=True,
            remote_uri=remote_uri,
            local_path=invocation.local_path,
            started_at=started_at,
            ended_at=ended_at,
            bytes_transferred=size,
            exit_status=invocation.exit_status,
        )

    def _failure(
        self,
        remote_uri: str,
        local_path: Path,
        started_at: datetime,
        error: str,
        *,
        exit_status: int | None = None,
        ended_at: datetime | None = None,
    ) -> TransferOutcome:
        log.warning("%s", error)
        return TransferOutcome(
            success=False,
            remote_uri=remote_uri,
            local_path=local_path,
            started_at=started_at,
            ended_at=ended_at or datetime.now(timezone.utc),
            exit_status=exit_status,
            error=error,
        )
