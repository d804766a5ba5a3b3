"""Tests for the transfer invoker."""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from stashcache_tester.testing.stubs import StubTransferClient
from stashcache_tester.transfer.base import (
    TransferClient,
    TransferError,
    TransferInvocation,
    TransportTuning,
)
from stashcache_tester.transfer.invoker import TransferInvoker


@dataclass(frozen=True, kw_only=True)
class RaisingClient(TransferClient):
    """Client whose invoke raises the configured exception."""

    error: Exception

    def remote_uri(self, endpoint_address: str, remote_path: str) -> str:
        return f"stub://{endpoint_address}/{remote_path.lstrip('/')}"

    async def invoke(
        self,
        remote_uri: str,
        destination: Path,
        tuning: TransportTuning,
        deadline: float,
    ) -> TransferInvocation:
        raise self.error


@dataclass(frozen=True, kw_only=True)
class HangingClient(TransferClient):
    """Client that never finishes and records whether it was cancelled."""

    cancelled: list[bool]

    def remote_uri(self, endpoint_address: str, remote_path: str) -> str:
        return f"stub://{endpoint_address}/{remote_path.lstrip('/')}"

    async def invoke(
        self,
        remote_uri: str,
        destination: Path,
        tuning: TransportTuning,
        deadline: float,
    ) -> TransferInvocation:
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            self.cancelled.append(True)
            raise
        raise AssertionError("unreachable")  # pragma: no cover


async def test_successful_fetch_reports_size(tmp_path: Path) -> None:
    """Successful transfer stats the local file for its size."""
    client = StubTransferClient(contents={"file1.dat": b"x" * 1234})
    invoker = TransferInvoker(client=client)

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert outcome.success
    assert outcome.bytes_transferred == 1234
    assert outcome.local_path == tmp_path / "file1.dat"
    assert outcome.remote_uri == "stub://cache1.example/test/file1.dat"
    assert outcome.exit_status == 0
    assert outcome.error is None
    assert outcome.ended_at >= outcome.started_at
    assert client.calls == ["stub://cache1.example/test/file1.dat"]


async def test_nonzero_exit_is_failure(tmp_path: Path) -> None:
    """Non-zero exit status is a failed outcome with the tool detail."""
    client = StubTransferClient(failures=frozenset({"file1.dat"}))
    invoker = TransferInvoker(client=client)

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert not outcome.success
    assert outcome.exit_status == 1
    assert outcome.bytes_transferred == 0
    assert outcome.error == (
        "Can't download stub://cache1.example/test/file1.dat: stub transfer failed"
    )


async def test_missing_local_file_is_failure(tmp_path: Path) -> None:
    """A stat failure after a clean exit is a failed outcome."""
    client = StubTransferClient(missing=frozenset({"file1.dat"}))
    invoker = TransferInvoker(client=client)

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert not outcome.success
    assert outcome.exit_status == 0
    assert outcome.error is not None
    assert outcome.error.startswith("Can't stat file file1.dat")


async def test_transfer_error_is_failure(tmp_path: Path) -> None:
    """TransferError raised by the client becomes a failed outcome."""
    invoker = TransferInvoker(client=RaisingClient(error=TransferError("refused")))

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert not outcome.success
    assert outcome.exit_status is None
    assert (
        outcome.error == "Can't download stub://cache1.example/test/file1.dat: refused"
    )


async def test_os_error_is_failure(tmp_path: Path) -> None:
    """A client that cannot be started becomes a failed outcome."""
    invoker = TransferInvoker(
        client=RaisingClient(error=FileNotFoundError("xrdcp not found"))
    )

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert not outcome.success
    assert "xrdcp not found" in (outcome.error or "")


async def test_deadline_cancels_client(tmp_path: Path) -> None:
    """Deadline expiry cancels the client and is reported as a failure."""
    cancelled: list[bool] = []
    invoker = TransferInvoker(client=HangingClient(cancelled=cancelled), deadline=0.05)

    outcome = await invoker.fetch("cache1.example", "/test/file1.dat", tmp_path)

    assert not outcome.success
    assert cancelled == [True]
    assert "deadline of 0.05s exceeded" in (outcome.error or "")


async def test_explicit_deadline_overrides_default(tmp_path: Path) -> None:
    """Per-call deadline takes precedence over the invoker default."""
    invoker = TransferInvoker(client=HangingClient(cancelled=[]), deadline=600)

    outcome = await invoker.fetch(
        "cache1.example", "/test/file1.dat", tmp_path, deadline=0.01
    )

    assert not outcome.success
    assert "deadline of 0.01s exceeded" in (outcome.error or "")


async def test_failed_outcome_names_file_like_client(tmp_path: Path) -> None:
    """Failed and successful outcomes derive the file name from the URI alike."""
    remote_path = "/test/file1.dat?authz=token#frag"
    failed = await TransferInvoker(
        client=RaisingClient(error=TransferError("refused"))
    ).fetch("cache1.example", remote_path, tmp_path)
    succeeded = await TransferInvoker(client=StubTransferClient()).fetch(
        "cache1.example", remote_path, tmp_path
    )

    assert failed.file_name == "file1.dat"
    assert succeeded.file_name == failed.file_name
