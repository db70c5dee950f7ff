"""Versioned schema migrations for stored and synced AppData documents.

Version 1 is the legacy shape, written without a version marker, where
``excludedDates`` may hold bare ISO strings. Version 2 stores every excluded
date as an object ``{"date": ..., "comment": ...}``.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any


logger = logging.getLogger(__name__)

LEGACY_SCHEMA_VERSION = 1
CURRENT_SCHEMA_VERSION = 2


def _v1_to_v2(document: dict[str, Any]) -> dict[str, Any]:
    """Upgrade string-array excluded dates to object entries."""
    upgraded = []
    for entry in document.get("excludedDates") or []:
        if isinstance(entry, str):
            upgraded.append({"date": entry})
        else:
            upgraded.append(entry)
    document["excludedDates"] = upgraded
    return document


MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _v1_to_v2,
}


def schema_version_of(document: dict[str, Any]) -> int:
    """Return the schema version recorded in a document (legacy when absent)."""
    version = document.get("schemaVersion")
    if version is None:
        return LEGACY_SCHEMA_VERSION
    if not isinstance(version, int) or isinstance(version, bool) or version < LEGACY_SCHEMA_VERSION:
        raise ValueError(f"Invalid schema version: {version!r}")
    return version


def migrate_app_data(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of document upgraded to CURRENT_SCHEMA_VERSION.

    Raises:
        ValueError: If the document was written by a newer schema than this code knows
    """
    version = schema_version_of(document)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(f"Schema version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}")

    migrated = copy.deepcopy(document)
    while version < CURRENT_SCHEMA_VERSION:
        migrated = MIGRATIONS[version](migrated)
        logger.info("Migrated app data", extra={"from_version": version, "to_version": version + 1})
        version += 1

    migrated["schemaVersion"] = CURRENT_SCHEMA_VERSION
    return migrated
