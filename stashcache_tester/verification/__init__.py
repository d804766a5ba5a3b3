"""Manifest-based integrity verifiers."""

from stashcache_tester.verification.base import Verifier

__all__ = ["Verifier"]
