"""Concurrent caches whose entries live exactly as long as their keys."""

from .appctx import CacheContext
from .cache import (
    CacheEntry,
    ReclamationChannel,
    ReferenceConcurrentCache,
    ReferencePolicy,
    SoftConcurrentCache,
    TrackedReference,
    WeakConcurrentCache,
)
from .introspection import FieldInfo, MetadataLookup, MethodInfo

__all__ = [
    "CacheContext",
    "CacheEntry",
    "FieldInfo",
    "MetadataLookup",
    "MethodInfo",
    "ReclamationChannel",
    "ReferenceConcurrentCache",
    "ReferencePolicy",
    "SoftConcurrentCache",
    "TrackedReference",
    "WeakConcurrentCache",
]

__version__ = "0.1.0"
