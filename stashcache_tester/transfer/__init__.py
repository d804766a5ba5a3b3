"""File transfer clients and the invoker that times and bounds them."""

from stashcache_tester.transfer.base import (
    TransferClient,
    TransferError,
    TransferInvocation,
    TransportTuning,
)
from stashcache_tester.transfer.invoker import DEFAULT_DEADLINE, TransferInvoker

__all__ = [
    "DEFAULT_DEADLINE",
    "TransferClient",
    "TransferError",
    "TransferInvocation",
    "TransferInvoker",
    "TransportTuning",
]
