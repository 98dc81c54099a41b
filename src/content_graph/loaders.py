"""Snapshot Loader Module

Loads the pre-exported JSON content snapshot and builds a RecordStore from
it. Supports the exported wrapper (``{"airtable_data": {...}}``) as well as
a bare mapping of collections, with camelCase or snake_case keys.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from .exceptions import SnapshotError
from .models import Record
from .store import COLLECTIONS, DIMENSION_AXES, TRANSLATION_TABLES, RecordStore

logger = logging.getLogger(__name__)

# Exported (camelCase) key -> store name
_KEY_ALIASES = {
    "mediaObjects": "media_objects",
    "setsMetadata": "sets_metadata",
    "audienceSegments": "audience_segments",
    "callToActions": "call_to_actions",
    "customerTypes": "customer_types",
    "deviceTypes": "device_types",
}


def _store_key(key: str) -> str:
    return _KEY_ALIASES.get(key, key)


def parse_records(raw_records: Any, label: str) -> List[Record]:
    """Validate raw record dicts into Records, skipping malformed entries."""
    if not isinstance(raw_records, list):
        logger.warning("Collection %s is not a list; treating as empty", label)
        return []

    records: List[Record] = []
    for idx, raw in enumerate(raw_records):
        try:
            records.append(Record.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed record idx=%d in %s: %s",
                idx,
                label,
                e.errors()[0].get("msg") if e.errors() else e,
            )
    return records


def _parse_group(raw: Any, allowed, label: str) -> Dict[str, List[Record]]:
    group: Dict[str, List[Record]] = {}
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("%s is not an object; ignoring", label)
        return group
    for key, value in raw.items():
        name = _store_key(key)
        if name not in allowed:
            logger.debug("Ignoring unknown %s entry %r", label, key)
            continue
        group[name] = parse_records(value, f"{label}.{key}")
    return group


def build_store(data: Mapping[str, Any]) -> RecordStore:
    """Build a RecordStore from an already-decoded snapshot mapping."""
    if not isinstance(data, Mapping):
        raise SnapshotError("Snapshot top level must be a JSON object")

    if "airtable_data" in data:
        data = data["airtable_data"]
        if not isinstance(data, Mapping):
            raise SnapshotError("'airtable_data' must be a JSON object")

    collections: Dict[str, List[Record]] = {}
    for key, value in data.items():
        name = _store_key(key)
        if name in ("dimensions", "translations"):
            continue
        if name not in COLLECTIONS:
            logger.debug("Ignoring unknown collection %r", key)
            continue
        collections[name] = parse_records(value, key)

    dimensions = _parse_group(data.get("dimensions"), DIMENSION_AXES, "dimensions")
    translations = _parse_group(
        data.get("translations"), TRANSLATION_TABLES, "translations"
    )

    store = RecordStore(collections, dimensions, translations)
    logger.debug("Built %r", store)
    return store


def load_snapshot(path: str | Path) -> RecordStore:
    """Load a content snapshot from a JSON file.

    Args:
        path: File path to the exported snapshot

    Returns:
        RecordStore holding every collection found in the file

    Raises:
        FileNotFoundError: If file does not exist
        json.JSONDecodeError: If file is not valid JSON
        SnapshotError: If the decoded JSON is not an object
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    store = build_store(data)
    logger.info("✓ Loaded snapshot %s: %r", path.name, store)
    return store
