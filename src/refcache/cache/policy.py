"""Reclamation strategies for tracked references."""

from __future__ import annotations

from enum import Enum


class ReferencePolicy(Enum):
    """How a :class:`~refcache.cache.reference.TrackedReference` lets go of its key.

    ``WEAK``
        Eligible for collection as soon as nothing but weak references
        reach the key.  The key is unreadable once collected.
    ``SOFT``
        Held strongly until the owner reports memory pressure, then
        behaves exactly like ``WEAK``.
    ``PHANTOM_LIKE``
        The key is never readable through the wrapper.  Only the frozen
        hash and identity equality remain, so it is useful for cleanup
        notifications and nothing else.
    """

    WEAK = "weak"
    SOFT = "soft"
    PHANTOM_LIKE = "phantom"

    @property
    def readable(self) -> bool:
        """Whether ``read()`` can ever hand the key back."""
        return self is not ReferencePolicy.PHANTOM_LIKE

    @property
    def holds_strongly(self) -> bool:
        """Whether a fresh wrapper keeps its key alive until softened."""
        return self is ReferencePolicy.SOFT
