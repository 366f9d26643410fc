"""Fixed-policy caches used by the metadata lookups."""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from .channel import ReclamationChannel
from .concurrent_cache import ReferenceConcurrentCache
from .policy import ReferencePolicy

K = TypeVar("K")
V = TypeVar("V")


class WeakConcurrentCache(ReferenceConcurrentCache[K, V]):
    """Entries vanish as soon as their key is unreachable outside the cache."""

    def __init__(self, channel: Optional[ReclamationChannel] = None, **kwargs: Any) -> None:
        super().__init__(ReferencePolicy.WEAK, channel, **kwargs)


class SoftConcurrentCache(ReferenceConcurrentCache[K, V]):
    """Keys stay alive until :meth:`relieve_memory_pressure` is called."""

    def __init__(self, channel: Optional[ReclamationChannel] = None, **kwargs: Any) -> None:
        super().__init__(ReferencePolicy.SOFT, channel, **kwargs)
