"""Health-check harness for StashCache cache endpoints."""
