"""Test factories for generating test data."""

from polyfactory import Use
from polyfactory.factories.pydantic_factory import ModelFactory

from stashcache_tester.models.config import ConfigEntry, EndpointTarget, TestSet


class EndpointTargetFactory(ModelFactory[EndpointTarget]):
    """Factory for EndpointTarget."""

    address = "cache1.example"
    site = "EXAMPLE_SITE"


class TestSetFactory(ModelFactory[TestSet]):
    """Factory for TestSet with two files and a manifest."""

    name = "small-files"
    files = ("/test/file1.dat", "/test/file2.dat")
    manifest = "/test/hashes"
    endpoint = Use(EndpointTargetFactory.build)


class ConfigEntryFactory(ModelFactory[ConfigEntry]):
    """Factory for ConfigEntry."""

    dnsname = "cache1.example"
    sitename = "EXAMPLE_SITE"
    hashfile = "/test/hashes"
    testsetname = "small-files"
    testfiles = ("/test/file1.dat", "/test/file2.dat")
