"""XRootD transfer client manifest."""

from stashcache_tester.manifest import BackendManifest
from stashcache_tester.transfer.xrootd.client import XRootDClient
from stashcache_tester.transfer.xrootd.config import XRootDConfig

xrootd_manifest = BackendManifest(
    config_cls=XRootDConfig,
    factory=XRootDClient.from_config,
)
