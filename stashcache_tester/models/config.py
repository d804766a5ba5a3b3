"""Models for the site configuration: endpoints and their test sets."""

from collections.abc import Iterable, Mapping, Sequence

from pydantic import Field

from stashcache_tester.models.base import Model


class EndpointTarget(Model):
    """A cache endpoint under test and the site it reports under."""

    address: str = Field(
        ..., min_length=1, description="Endpoint hostname, optionally with port"
    )
    site: str = Field(..., min_length=1, description="Site label for reporting")


class TestSet(Model):
    """Named bundle of remote files plus the manifest used to verify them."""

    __test__ = False

    name: str = Field(..., min_length=1, description="Test set name")
    files: tuple[str, ...] = Field(
        default=(), description="Remote paths of the files to download"
    )
    manifest: str = Field(..., min_length=1, description="Remote path of manifest")
    endpoint: EndpointTarget = Field(..., description="Endpoint serving the set")


class ConfigEntry(Model):
    """One record of the site configuration file, keyed as on disk."""

    dnsname: str = Field(..., min_length=1)
    sitename: str = Field(..., min_length=1)
    hashfile: str = Field(..., min_length=1)
    testsetname: str = Field(..., min_length=1)
    testfiles: tuple[str, ...] = ()

    def to_test_set(self) -> TestSet:
        """Convert the on-disk record into a test set bound to its endpoint."""
        return TestSet(
            name=self.testsetname,
            files=self.testfiles,
            manifest=self.hashfile,
            endpoint=EndpointTarget(address=self.dnsname, site=self.sitename),
        )


class HarnessConfig(Model):
    """Complete harness configuration, built once at startup."""

    test_sets: tuple[TestSet, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[ConfigEntry]) -> "HarnessConfig":
        """Build the configuration from decoded config file records."""
        return cls(test_sets=tuple(entry.to_test_set() for entry in entries))

    def by_site(self) -> Mapping[str, Mapping[EndpointTarget, Sequence[TestSet]]]:
        """Group test sets by site, then by endpoint.

        Sites, endpoints and test sets keep their configuration order.
        """
        sites: dict[str, dict[EndpointTarget, list[TestSet]]] = {}
        for test_set in self.test_sets:
            endpoints = sites.setdefault(test_set.endpoint.site, {})
            endpoints.setdefault(test_set.endpoint, []).append(test_set)
        return sites
