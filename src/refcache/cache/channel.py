"""Delivery path from the garbage collector to the caches.

Weak-reference callbacks push dead :class:`TrackedReference` objects onto a
:class:`ReclamationChannel`; each cache drains the notifications addressed
to it and drops the matching entries.  A single channel may be shared by
several caches because pending notifications are partitioned by owner tag.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Set

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .reference import TrackedReference

LOGGER = logging.getLogger(__name__)


class ReclamationChannel:
    """Thread-safe queue of reclaimed references, partitioned by owner.

    A :class:`threading.RLock` (reentrant) is used because a collection,
    and with it :meth:`enqueue`, may run on a thread that is already inside
    :meth:`drain` (the GC can trigger on any allocation).
    """

    def __init__(self) -> None:
        self._pending: Dict[int, Deque["TrackedReference"]] = {}
        self._retired: Set[int] = set()
        self._owners = itertools.count(1)
        self._lock = threading.RLock()

    def new_owner(self) -> int:
        """Return a tag that no other consumer of this channel uses."""
        with self._lock:
            return next(self._owners)

    def enqueue(self, ref: "TrackedReference") -> None:
        """Record that *ref* lost its key.  Called from weak-ref callbacks."""
        with self._lock:
            if ref.owner in self._retired:
                return
            queue = self._pending.get(ref.owner)
            if queue is None:
                queue = self._pending[ref.owner] = deque()
            queue.append(ref)

    def drain(self, owner: int, limit: Optional[int] = None) -> List["TrackedReference"]:
        """Remove and return up to *limit* notifications for *owner*.

        ``None`` drains everything currently queued for *owner*.
        """
        drained: List["TrackedReference"] = []
        with self._lock:
            queue = self._pending.get(owner)
            if not queue:
                return drained
            while queue and (limit is None or len(drained) < limit):
                drained.append(queue.popleft())
            if not queue:
                self._pending.pop(owner, None)
        if drained:
            LOGGER.debug("Drained %d reclaimed reference(s) for owner %d", len(drained), owner)
        return drained

    def discard(self, owner: int) -> int:
        """Forget every pending notification for *owner*; return how many."""
        with self._lock:
            queue = self._pending.pop(owner, None)
            return len(queue) if queue else 0

    def pending(self, owner: Optional[int] = None) -> int:
        """Number of queued notifications, for one owner or for all."""
        with self._lock:
            if owner is not None:
                return len(self._pending.get(owner, ()))
            return sum(len(queue) for queue in self._pending.values())

    def retire(self, owner: int) -> int:
        """Stop accepting notifications for *owner* and drop the queued ones.

        Called when the consuming cache is garbage collected; its wrappers
        may outlive it in reference cycles and keep reporting.
        """
        with self._lock:
            self._retired.add(owner)
            queue = self._pending.pop(owner, None)
            return len(queue) if queue else 0
