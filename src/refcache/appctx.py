"""Process-wide cache infrastructure, built explicitly and passed around.

Nothing in refcache reaches for a module-level cache.  An application
builds one :class:`CacheContext` at start-up and hands it (or the
:class:`~refcache.introspection.MetadataLookup` it owns) to whatever needs
cached metadata.  The context lives until process exit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from jsonschema import ValidationError

from .cache import (
    ReclamationChannel,
    ReferenceConcurrentCache,
    SoftConcurrentCache,
    WeakConcurrentCache,
)
from .config import FIELDS_CACHE_NAME, METHODS_CACHE_NAME
from .di import Container
from .errors import SettingsValidationError
from .infrastructure.services.cache_stats import CacheStatsCollector
from .infrastructure.services.memory_monitor import MemoryMonitor
from .introspection import MetadataLookup
from .settings import merge_with_defaults


def _create_cache(container: Container, settings: Dict[str, Any], name: str) -> ReferenceConcurrentCache:
    policy = settings["caches"].get(name, {}).get("policy", "weak")
    cache_cls = SoftConcurrentCache if policy == "soft" else WeakConcurrentCache
    cache = cache_cls(
        container.resolve(ReclamationChannel),
        name=name,
        stats=container.resolve(CacheStatsCollector),
        purge_batch_size=settings["purge_batch_size"],
    )
    if cache.policy.holds_strongly:
        container.resolve(MemoryMonitor).watch(cache)
    return cache


def _create_di_container(
    settings: Dict[str, Any], channel: Optional[ReclamationChannel] = None
) -> Container:
    container = Container()
    if channel is not None:
        container.register_instance(ReclamationChannel, channel)
    else:
        container.register_singleton(ReclamationChannel)
    container.register_singleton(CacheStatsCollector)
    container.register_singleton(
        MemoryMonitor,
        warning_bytes=settings["memory"]["warning_bytes"],
        critical_bytes=settings["memory"]["critical_bytes"],
    )
    container.register_singleton(
        MetadataLookup,
        factory=lambda c: MetadataLookup(
            _create_cache(c, settings, FIELDS_CACHE_NAME),
            _create_cache(c, settings, METHODS_CACHE_NAME),
        ),
    )
    return container


@dataclass
class CacheContext:
    """Shared channel, statistics, memory monitor and metadata caches."""

    settings: Dict[str, Any] = field(default_factory=dict)
    channel_override: Optional[ReclamationChannel] = field(default=None, repr=False)
    container: Container = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self.settings = merge_with_defaults(self.settings)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self.container = _create_di_container(self.settings, self.channel_override)

    @property
    def channel(self) -> ReclamationChannel:
        return self.container.resolve(ReclamationChannel)

    @property
    def stats(self) -> CacheStatsCollector:
        return self.container.resolve(CacheStatsCollector)

    @property
    def memory(self) -> MemoryMonitor:
        return self.container.resolve(MemoryMonitor)

    @property
    def lookup(self) -> MetadataLookup:
        return self.container.resolve(MetadataLookup)

    def caches(self) -> Dict[str, ReferenceConcurrentCache]:
        lookup = self.lookup
        return {
            lookup.fields_cache.name: lookup.fields_cache,
            lookup.methods_cache.name: lookup.methods_cache,
        }

    def purge_all(self) -> int:
        """Purge every cache in the context; return the number of entries dropped."""
        return sum(cache.purge_stale() for cache in self.caches().values())
