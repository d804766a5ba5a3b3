"""Models for transfer, test set, endpoint and site outcomes."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from stashcache_tester.models.config import EndpointTarget, TestSet

type FailureStage = Literal["setup", "download", "verification", "error"]


@dataclass(frozen=True, kw_only=True)
class TransferOutcome:
    """Result of a single file transfer.

    Created once per transfer attempt and never mutated afterwards.
    """

    success: bool
    remote_uri: str
    local_path: Path
    started_at: datetime
    ended_at: datetime
    bytes_transferred: int = 0
    exit_status: int | None = None
    error: str | None = None

    @property
    def duration(self) -> float:
        """Elapsed wall-clock time in seconds."""
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def file_name(self) -> str:
        return self.local_path.name


@dataclass(frozen=True, kw_only=True)
class TestSetResult:
    """Aggregate outcome of one test set run against its endpoint.

    ``transfers`` holds every transfer attempted, in order, including the
    manifest download. ``failure_stage`` and ``message`` are set only when
    the run failed.
    """

    __test__ = False

    test_set: TestSet
    success: bool
    started_at: datetime
    ended_at: datetime
    transfers: Sequence[TransferOutcome] = ()
    verification_attempted: bool = False
    failure_stage: FailureStage | None = None
    message: str | None = None

    @property
    def duration(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()


@dataclass(frozen=True, kw_only=True)
class EndpointResult:
    """Aggregate outcome of all test sets run against one endpoint.

    ``error`` is set when the endpoint run itself could not be set up.
    """

    endpoint: EndpointTarget
    results: Sequence[TestSetResult]
    started_at: datetime
    ended_at: datetime
    error: str | None = None

    @property
    def success(self) -> bool:
        """True iff the run was set up and every test set passed."""
        return self.error is None and all(result.success for result in self.results)

    @property
    def failed_sets(self) -> Sequence[TestSetResult]:
        return [result for result in self.results if not result.success]

    @property
    def duration(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()

    def failure_summary(self) -> str | None:
        """Describe why the endpoint failed, or None if it passed."""
        if self.error is not None:
            return self.error
        failures = [
            f"{result.test_set.name}: {result.message}" for result in self.failed_sets
        ]
        return "; ".join(failures) or None


@dataclass(frozen=True, kw_only=True)
class SiteReport:
    """Final pass/fail for one site label."""

    site: str
    endpoints: Sequence[EndpointResult] = ()
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and all(
            endpoint.success for endpoint in self.endpoints
        )

    def failure_summary(self) -> str | None:
        if self.error is not None:
            return self.error
        failures = [
            f"{endpoint.endpoint.address} ({summary})"
            for endpoint in self.endpoints
            if (summary := endpoint.failure_summary()) is not None
        ]
        return "; ".join(failures) or None
