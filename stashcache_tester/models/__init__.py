"""Data models for configuration, results and telemetry."""
