"""HTTP transfer client plugin."""

from stashcache_tester.transfer.http.client import HttpTransferClient
from stashcache_tester.transfer.http.config import HttpTransferConfig
from stashcache_tester.transfer.http.manifest import http_manifest

__all__ = ["HttpTransferClient", "HttpTransferConfig", "http_manifest"]
