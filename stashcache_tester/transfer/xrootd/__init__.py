"""XRootD (xrdcp) transfer client plugin."""

from stashcache_tester.transfer.xrootd.client import XRootDClient
from stashcache_tester.transfer.xrootd.config import XRootDConfig
from stashcache_tester.transfer.xrootd.manifest import xrootd_manifest

__all__ = ["XRootDClient", "XRootDConfig", "xrootd_manifest"]
