"""Default configuration values for refcache."""

from __future__ import annotations

from typing import Final

# Opportunistic purges inside get/put/compute_if_absent drain at most this many
# reclamation notifications per call.  ``purge_stale()`` always drains all.
PURGE_BATCH_SIZE: Final[int] = 64

# Names under which the metadata caches report to the stats collector.
FIELDS_CACHE_NAME: Final[str] = "fields"
METHODS_CACHE_NAME: Final[str] = "methods"

# Memory pressure thresholds.  Crossing the critical threshold softens every
# SOFT reference held by caches registered with the monitor.
MEMORY_WARNING_BYTES: Final[int] = 1 << 30
MEMORY_CRITICAL_BYTES: Final[int] = 2 << 30

SETTINGS_SCHEMA_ID: Final[str] = "refcache/settings@1"
SETTINGS_FILE_NAME: Final[str] = "refcache.json"
