"""Reference-backed concurrent caches."""

from .channel import ReclamationChannel
from .concurrent_cache import CacheEntry, ReferenceConcurrentCache
from .policy import ReferencePolicy
from .reference import TrackedReference
from .weak_cache import SoftConcurrentCache, WeakConcurrentCache

__all__ = [
    "CacheEntry",
    "ReclamationChannel",
    "ReferenceConcurrentCache",
    "ReferencePolicy",
    "SoftConcurrentCache",
    "TrackedReference",
    "WeakConcurrentCache",
]
