"""Abstract base class for file transfer clients."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from pydantic import Field

from stashcache_tester.models.base import Model


class TransferError(Exception):
    """Raised by a client when a transfer cannot be carried out."""


class TransportTuning(Model):
    """Fixed connection and transfer settings handed to every client.

    These tune the transport layer of the client; the harness itself never
    retries a failed transfer.
    """

    request_timeout: int = Field(default=30, description="Seconds per request")
    chunk_size: int = Field(default=8388608, description="Bytes read per chunk")
    timeout_resolution: int = Field(
        default=5, description="Seconds between timeout checks"
    )
    connection_window: int = Field(
        default=30, description="Seconds allowed for the initial connection"
    )
    connection_retry: int = Field(default=2, description="Connection attempts")
    stream_timeout: int = Field(
        default=30, description="Seconds a stream may stay idle"
    )

    def as_env(self) -> Mapping[str, str]:
        """Environment overrides understood by the XRootD client library."""
        return {
            "XRD_REQUESTTIMEOUT": str(self.request_timeout),
            "XRD_CPCHUNKSIZE": str(self.chunk_size),
            "XRD_TIMEOUTRESOLUTION": str(self.timeout_resolution),
            "XRD_CONNECTIONWINDOW": str(self.connection_window),
            "XRD_CONNECTIONRETRY": str(self.connection_retry),
            "XRD_STREAMTIMEOUT": str(self.stream_timeout),
        }


@dataclass(frozen=True, kw_only=True)
class TransferInvocation:
    """What a client reports back after running one transfer."""

    exit_status: int
    local_path: Path
    detail: str | None = None


def local_name(remote_uri: str) -> str:
    """File name a remote URI is stored under locally."""
    return PurePosixPath(urlsplit(remote_uri).path).name


@dataclass(frozen=True, kw_only=True)
class TransferClient(ABC):
    """Abstract base for clients that fetch one remote file into a directory."""

    @abstractmethod
    def remote_uri(self, endpoint_address: str, remote_path: str) -> str:
        """Build the fully qualified URI of a file served by an endpoint."""

    @abstractmethod
    async def invoke(
        self,
        remote_uri: str,
        destination: Path,
        tuning: TransportTuning,
        deadline: float,
    ) -> TransferInvocation:
        """Fetch ``remote_uri`` into the ``destination`` directory.

        Args:
            remote_uri: URI returned by ``remote_uri``
            destination: Existing directory the file is written into
            tuning: Transport settings to apply
            deadline: Wall-clock budget in seconds for the whole transfer

        Returns:
            Exit status of the transfer and the path of the local file

        Raises:
            TransferError: If the transfer could not be run at all
            OSError: If the client could not be started or write locally

        Implementations must release any process or connection they hold
        when cancelled.

        """
