"""HTTP transfer client manifest."""

from stashcache_tester.manifest import BackendManifest
from stashcache_tester.transfer.http.client import HttpTransferClient
from stashcache_tester.transfer.http.config import HttpTransferConfig

http_manifest = BackendManifest(
    config_cls=HttpTransferConfig,
    factory=HttpTransferClient.from_config,
)
