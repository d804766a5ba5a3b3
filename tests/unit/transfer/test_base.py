"""Tests for transfer client helpers."""

import pytest

from stashcache_tester.transfer.base import TransportTuning, local_name


def test_default_tuning_env() -> None:
    """Default tuning maps onto the fixed XRootD environment overrides."""
    assert TransportTuning().as_env() == {
        "XRD_REQUESTTIMEOUT": "30",
        "XRD_CPCHUNKSIZE": "8388608",
        "XRD_TIMEOUTRESOLUTION": "5",
        "XRD_CONNECTIONWINDOW": "30",
        "XRD_CONNECTIONRETRY": "2",
        "XRD_STREAMTIMEOUT": "30",
    }


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("root://cache1.example//user/test/file1.dat", "file1.dat"),
        ("http://cache1.example:8000/user/test/hashes", "hashes"),
        ("stub://cache1.example/file", "file"),
    ],
)
def test_local_name(uri: str, expected: str) -> None:
    """Local file name is the last path component of the URI."""
    assert local_name(uri) == expected
