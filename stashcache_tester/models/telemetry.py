"""Wire model for records shipped to the metrics collector."""

from datetime import datetime, timezone
from typing import Literal

from stashcache_tester.models.base import Model
from stashcache_tester.models.config import EndpointTarget
from stashcache_tester.models.result import (
    EndpointResult,
    TestSetResult,
    TransferOutcome,
)

TRANSFER_TAG = "stashcache-tester"
TEST_SET_TAG = "stashcache-tester-testresult"
ENDPOINT_TAG = "stashcache-tester-endpoint"

type RecordStatus = Literal["Success", "Failure"]


def epoch_ms(moment: datetime) -> int:
    """Convert a datetime to milliseconds since the epoch."""
    return int(moment.timestamp() * 1000)


def _status(success: bool) -> RecordStatus:
    return "Success" if success else "Failure"


class TelemetryRecord(Model):
    """One outcome record, field names as the collector expects them.

    Durations are milliseconds and timestamps are epoch milliseconds.
    """

    cache: str
    host: str
    sitename: str
    filename: str = ""
    filesize: int = 0
    download_size: int = 0
    download_time: float = 0.0
    start1: int = 0
    end1: int = 0
    start2: int = 0
    end2: int = 0
    start3: int = 0
    end3: int = 0
    timestamp: int
    status: RecordStatus
    tries: int = 1
    xrdcp_version: str = TRANSFER_TAG
    xrdexit1: str = ""
    xrdexit2: str = ""
    destination_space: str = ""

    @classmethod
    def from_transfer(
        cls, endpoint: EndpointTarget, outcome: TransferOutcome
    ) -> "TelemetryRecord":
        """Record for a single file transfer."""
        return cls(
            cache=endpoint.address,
            host=endpoint.address,
            sitename=endpoint.site,
            filename=outcome.file_name,
            filesize=outcome.bytes_transferred,
            download_size=outcome.bytes_transferred,
            download_time=outcome.duration * 1000,
            start1=epoch_ms(outcome.started_at),
            end1=epoch_ms(outcome.ended_at),
            timestamp=epoch_ms(datetime.now(timezone.utc)),
            status=_status(outcome.success),
            xrdcp_version=TRANSFER_TAG,
            xrdexit1="" if outcome.exit_status is None else str(outcome.exit_status),
            destination_space=outcome.error or "",
        )

    @classmethod
    def from_test_set(cls, result: TestSetResult) -> "TelemetryRecord":
        """Record summarizing one test set run."""
        endpoint = result.test_set.endpoint
        return cls(
            cache=endpoint.address,
            host=endpoint.address,
            sitename=endpoint.site,
            filename=result.test_set.name,
            download_size=sum(t.bytes_transferred for t in result.transfers),
            download_time=result.duration * 1000,
            start1=epoch_ms(result.started_at),
            end1=epoch_ms(result.ended_at),
            timestamp=epoch_ms(datetime.now(timezone.utc)),
            status=_status(result.success),
            xrdcp_version=TEST_SET_TAG,
            xrdexit1="0",
            destination_space=result.message or "",
        )

    @classmethod
    def from_endpoint(cls, result: EndpointResult) -> "TelemetryRecord":
        """Record summarizing a whole endpoint run."""
        return cls(
            cache=result.endpoint.address,
            host=result.endpoint.address,
            sitename=result.endpoint.site,
            download_size=sum(
                t.bytes_transferred for r in result.results for t in r.transfers
            ),
            download_time=result.duration * 1000,
            start1=epoch_ms(result.started_at),
            end1=epoch_ms(result.ended_at),
            timestamp=epoch_ms(datetime.now(timezone.utc)),
            status=_status(result.success),
            xrdcp_version=ENDPOINT_TAG,
            xrdexit1="0",
            destination_space=result.failure_summary() or "",
        )
