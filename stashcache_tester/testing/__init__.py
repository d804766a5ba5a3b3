"""Factories and stub collaborators for tests."""
