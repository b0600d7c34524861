"""Metadata provider protocol and snapshot-backed providers.

The live provider (a database driver enumerating the catalog) belongs to the
host. Here: an in-memory provider serving a pre-captured snapshot, and a
loader reading such snapshots from JSON or YAML files.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError

from schemaguard.core.errors import AnalysisError
from schemaguard.core.logging import get_logger
from schemaguard.metadata.models import (
    DatabaseMetadata,
    MetadataSnapshot,
    coerce_snapshot,
    parse_snapshot,
)

logger = get_logger(__name__)


@runtime_checkable
class MetadataProvider(Protocol):
    """Anything that can fetch a fresh metadata snapshot."""

    async def get_metadata(self) -> MetadataSnapshot: ...


class StaticMetadataProvider:
    """Serves one fixed snapshot. Accepts models or raw provider dicts."""

    def __init__(self, snapshot: Mapping[str, Any]) -> None:
        self._snapshot = coerce_snapshot(snapshot)

    async def get_metadata(self) -> MetadataSnapshot:
        return self._snapshot

    def replace(self, snapshot: Mapping[str, Any]) -> None:
        """Swap in a new snapshot, e.g. after a schema change."""
        self._snapshot = coerce_snapshot(snapshot)


def load_snapshot(path: Path) -> dict[str, DatabaseMetadata]:
    """Load a snapshot from a JSON or YAML file.

    Raises:
        AnalysisError: If the file is missing, unreadable, or not snapshot-shaped.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise AnalysisError.invalid_snapshot(str(path), str(e)) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise AnalysisError.invalid_snapshot(str(path), str(e)) from e

    if not isinstance(raw, dict):
        raise AnalysisError.invalid_snapshot(str(path), "top level must be a mapping")

    try:
        snapshot = parse_snapshot(raw)
        logger.debug("snapshot_loaded", path=str(path), databases=len(snapshot))
        return snapshot
    except ValidationError as e:
        err = e.errors()[0]
        location = ".".join(str(loc) for loc in err["loc"])
        raise AnalysisError.invalid_snapshot(str(path), f"{location}: {err['msg']}") from e
