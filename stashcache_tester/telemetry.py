"""Telemetry emitters that ship outcome records to the metrics collector."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from pydantic import BaseModel, Field

from stashcache_tester.models.telemetry import TelemetryRecord

log = logging.getLogger(__name__)

DEFAULT_COLLECTOR_URL = "http://uct2-collectd.mwt2.org:9951"


class TelemetryConfig(BaseModel):
    """Configuration for the HTTP telemetry emitter."""

    collector_url: str = DEFAULT_COLLECTOR_URL
    timeout: float = Field(default=10, gt=0, description="Seconds per POST")


@dataclass(frozen=True, kw_only=True)
class TelemetryEmitter(ABC):
    """Ships telemetry records; delivery failures never reach the caller."""

    @abstractmethod
    async def emit(self, record: TelemetryRecord) -> None:
        """Send one record. Must not raise on delivery failure."""

    async def send(self, record: TelemetryRecord) -> None:
        """Emit a record, logging anything the emitter lets escape.

        Callers on the result path use this so that telemetry can never
        change a test outcome.
        """
        try:
            await self.emit(record)
        except Exception:
            log.exception("Telemetry emitter failed for %s", record.host)


@dataclass(frozen=True, kw_only=True)
class NullTelemetryEmitter(TelemetryEmitter):
    """Drops every record."""

    async def emit(self, record: TelemetryRecord) -> None:
        log.debug("Telemetry disabled, dropping record for %s", record.filename)


@dataclass(frozen=True, kw_only=True)
class HttpTelemetryEmitter(TelemetryEmitter):
    """POSTs each record as JSON to the collector.

    ``emit`` only schedules the POST; pending posts are drained when the
    ``from_config`` context exits.
    """

    config: TelemetryConfig
    session: aiohttp.ClientSession = field(repr=False)
    _pending: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TelemetryConfig
    ) -> AsyncGenerator["HttpTelemetryEmitter", None]:
        """Create emitter with managed session lifecycle."""
        timeout = aiohttp.ClientTimeout(total=config.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            emitter = cls(config=config, session=session)
            try:
                yield emitter
            finally:
                await emitter.drain()

    async def emit(self, record: TelemetryRecord) -> None:
        task = asyncio.create_task(
            self._post(record), name=f"telemetry:{record.filename or record.host}"
        )
        self._pending.add(task)
        task.add_done_callback(self._finished)

    async def drain(self) -> None:
        """Wait for every scheduled POST to finish."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and (exc := task.exception()) is not None:
            log.error("Telemetry post %s failed", task.get_name(), exc_info=exc)

    async def _post(self, record: TelemetryRecord) -> None:
        payload = record.model_dump(mode="json")
        try:
            async with self.session.post(
                self.config.collector_url, json=payload
            ) as response:
                if response.status >= 300:
                    text = await response.text()
                    log.warning(
                        "Collector rejected record for %s: %s %s",
                        record.filename or record.host,
                        response.status,
                        text,
                    )
        except (aiohttp.ClientError, TimeoutError) as exc:
            log.warning(
                "Error reporting test results to collector %s: %s",
                self.config.collector_url,
                exc,
            )
