"""Loader for the site configuration file."""

import asyncio
import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from stashcache_tester.models.config import ConfigEntry, HarnessConfig

YAML_SUFFIXES = frozenset([".yaml", ".yml"])

_ENTRIES = TypeAdapter(list[ConfigEntry])


async def load_harness_config(config_path: Path) -> HarnessConfig:
    """Load and validate the site configuration.

    The file holds a list of records with the keys ``dnsname``,
    ``sitename``, ``hashfile``, ``testsetname`` and ``testfiles``. It is
    parsed as YAML for ``.yaml``/``.yml`` files and as JSON otherwise.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, malformed or fails validation

    """
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    text = await asyncio.to_thread(config_path.read_text)
    raw = _decode(config_path, text)
    if raw is None:
        raise ValueError(f"Empty config file: {config_path}")

    try:
        entries = _ENTRIES.validate_python(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid config schema in {config_path}: {exc}") from exc

    return HarnessConfig.from_entries(entries)


def _decode(config_path: Path, text: str) -> Any:
    if not text.strip():
        return None

    if config_path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {config_path}: {exc}") from exc
