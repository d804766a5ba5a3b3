"""Test set runner: downloads one test set from its endpoint and verifies it."""

import logging
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from stashcache_tester.models.config import EndpointTarget, TestSet
from stashcache_tester.models.result import (
    FailureStage,
    TestSetResult,
    TransferOutcome,
)
from stashcache_tester.models.telemetry import TelemetryRecord
from stashcache_tester.telemetry import TelemetryEmitter
from stashcache_tester.transfer.invoker import TransferInvoker
from stashcache_tester.verification.base import Verifier

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TestSetRunner:
    """Runs one test set in its own scratch directory.

    Files are fetched one after another; the first failed transfer ends the
    run without verification. After all files arrive the manifest is
    fetched and checked.
    """

    __test__ = False

    transfer: TransferInvoker
    verifier: Verifier
    telemetry: TelemetryEmitter

    async def run_test_set(
        self,
        endpoint: EndpointTarget,
        test_set: TestSet,
        work_root: Path | None = None,
    ) -> TestSetResult:
        """Run ``test_set`` against ``endpoint``.

        Args:
            endpoint: Endpoint to download from
            test_set: Files and manifest to fetch
            work_root: Parent for the scratch directory (system temp if None)

        Returns:
            The aggregate result; failures are reported, never raised

        """
        started_at = datetime.now(timezone.utc)
        try:
            scratch = tempfile.TemporaryDirectory(prefix="testset-", dir=work_root)
        except OSError as exc:
            log.error("Couldn't create directory for %s: %s", test_set.name, exc)
            return _failed(
                test_set,
                started_at,
                [],
                "setup",
                f"couldn't create working directory: {exc}",
            )

        with scratch as directory:
            return await self._run_in(Path(directory), endpoint, test_set, started_at)

    async def _run_in(
        self,
        directory: Path,
        endpoint: EndpointTarget,
        test_set: TestSet,
        started_at: datetime,
    ) -> TestSetResult:
        transfers: list[TransferOutcome] = []

        for remote_file in test_set.files:
            outcome = await self.transfer.fetch(
                endpoint.address, remote_file, directory
            )
            transfers.append(outcome)
            await self.telemetry.send(TelemetryRecord.from_transfer(endpoint, outcome))
            if not outcome.success:
                return _failed(
                    test_set,
                    started_at,
                    transfers,
                    "download",
                    outcome.error or f"can't download {outcome.remote_uri}",
                )

        manifest = await self.transfer.fetch(
            endpoint.address, test_set.manifest, directory
        )
        transfers.append(manifest)
        if not manifest.success:
            await self.telemetry.send(
                TelemetryRecord.from_transfer(endpoint, manifest)
            )
            return _failed(
                test_set,
                started_at,
                transfers,
                "download",
                f"can't download file hash: {manifest.error}",
            )

        if not await self.verifier.verify(directory, manifest.local_path.name):
            log.warning(
                "Can't verify file hashes for %s from %s",
                test_set.name,
                endpoint.address,
            )
            return _failed(
                test_set,
                started_at,
                transfers,
                "verification",
                "verification failed",
                verification_attempted=True,
            )

        return TestSetResult(
            test_set=test_set,
            success=True,
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
            transfers=transfers,
            verification_attempted=True,
        )


def _failed(
    test_set: TestSet,
    started_at: datetime,
    transfers: list[TransferOutcome],
    stage: FailureStage,
    message: str,
    *,
    verification_attempted: bool = False,
) -> TestSetResult:
    return TestSetResult(
        test_set=test_set,
        success=False,
        started_at=started_at,
        ended_at=datetime.now(timezone.utc),
        transfers=transfers,
        verification_attempted=verification_attempted,
        failure_stage=stage,
        message=message,
    )
