"""Endpoint orchestrator: runs every test set configured for one endpoint."""

import asyncio
import logging
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from stashcache_tester.models.config import EndpointTarget, TestSet
from stashcache_tester.models.result import EndpointResult, TestSetResult
from stashcache_tester.models.telemetry import TelemetryRecord
from stashcache_tester.runner import TestSetRunner
from stashcache_tester.telemetry import TelemetryEmitter

log = logging.getLogger(__name__)

type FailurePolicy = Literal["continue", "abort"]


@dataclass(frozen=True, kw_only=True)
class EndpointOrchestrator:
    """Runs an endpoint's test sets one at a time and aggregates them.

    With the ``continue`` policy every test set runs even after a failure so
    the report is complete; ``abort`` stops at the first failed set.
    """

    runner: TestSetRunner
    telemetry: TelemetryEmitter
    failure_policy: FailurePolicy = "continue"
    work_root: Path | None = None

    async def run_endpoint(
        self, endpoint: EndpointTarget, test_sets: Sequence[TestSet]
    ) -> EndpointResult:
        """Run ``test_sets`` against ``endpoint`` and report the aggregate.

        Args:
            endpoint: Endpoint under test
            test_sets: Test sets in configuration order

        Returns:
            Endpoint result; successful iff every test set passed

        """
        started_at = datetime.now(timezone.utc)
        try:
            scratch = tempfile.TemporaryDirectory(
                prefix="endpoint-", dir=self.work_root
            )
        except OSError as exc:
            log.error(
                "Couldn't create test directory for %s: %s", endpoint.address, exc
            )
            result = EndpointResult(
                endpoint=endpoint,
                results=[],
                started_at=started_at,
                ended_at=datetime.now(timezone.utc),
                error=f"couldn't create test directory: {exc}",
            )
            await self.telemetry.send(TelemetryRecord.from_endpoint(result))
            return result

        with scratch as directory:
            results = await self._run_test_sets(endpoint, test_sets, Path(directory))

        result = EndpointResult(
            endpoint=endpoint,
            results=results,
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
        )
        log.info(
            "Endpoint %s finished: %d/%d test set(s) passed in %.1fs",
            endpoint.address,
            len(results) - len(result.failed_sets),
            len(test_sets),
            result.duration,
        )
        await self.telemetry.send(TelemetryRecord.from_endpoint(result))
        return result

    async def _run_test_sets(
        self,
        endpoint: EndpointTarget,
        test_sets: Sequence[TestSet],
        directory: Path,
    ) -> Sequence[TestSetResult]:
        results: list[TestSetResult] = []

        for index, test_set in enumerate(test_sets):
            task = asyncio.create_task(
                self.runner.run_test_set(endpoint, test_set, work_root=directory),
                name=f"{endpoint.address}:{test_set.name}",
            )
            result = await self._collect(task, test_set)
            results.append(result)
            await self.telemetry.send(TelemetryRecord.from_test_set(result))

            if result.success:
                log.info(
                    "Verified %s using endpoint %s", test_set.name, endpoint.address
                )
                continue

            log.warning(
                "Failed to verify %s using endpoint %s: %s",
                test_set.name,
                endpoint.address,
                result.message,
            )
            if self.failure_policy == "abort":
                skipped = len(test_sets) - index - 1
                if skipped:
                    log.info(
                        "Skipping %d remaining test set(s) for %s",
                        skipped,
                        endpoint.address,
                    )
                break

        return results

    async def _collect(
        self, task: asyncio.Task[TestSetResult], test_set: TestSet
    ) -> TestSetResult:
        """Await a runner task, turning an unexpected exception into a failure."""
        started_at = datetime.now(timezone.utc)
        try:
            return await task
        except Exception as exc:
            log.error(
                "Test set %s raised unexpectedly: %s", test_set.name, exc, exc_info=exc
            )
            return TestSetResult(
                test_set=test_set,
                success=False,
                started_at=started_at,
                ended_at=datetime.now(timezone.utc),
                failure_stage="error",
                message=str(exc) or type(exc).__name__,
            )
