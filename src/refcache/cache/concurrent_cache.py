"""Concurrent cache whose entries die with their keys.

Keys are stored as :class:`TrackedReference` wrappers so the cache never
keeps a key alive.  When the collector reclaims a key, the wrapper reports
itself on a :class:`ReclamationChannel`; the cache drains that channel at
the start of every operation (a bounded batch) and fully on
:meth:`ReferenceConcurrentCache.purge_stale`.

``compute_if_absent`` installs a placeholder under the store lock before
running the supplier, so racing callers for the same key wait for the
first caller's result instead of computing it again.
"""

from __future__ import annotations

import logging
import threading
import weakref
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar, Union

from ..config import PURGE_BATCH_SIZE
from ..errors import InvalidPolicyError, RecursiveComputationError
from ..infrastructure.services.cache_stats import CacheStatsCollector
from .channel import ReclamationChannel
from .policy import ReferencePolicy
from .reference import TrackedReference

LOGGER = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[K, V]):
    """One published key/value pair."""

    reference: TrackedReference[K]
    value: V

    @property
    def key(self) -> Optional[K]:
        return self.reference.read()


class _Abandoned(Exception):
    """Set on a placeholder whose computation failed; waiters retry."""


class _Pending:
    """Placeholder for a value that one thread is still computing."""

    __slots__ = ("reference", "future", "thread_id")

    def __init__(self, reference: TrackedReference) -> None:
        self.reference = reference
        self.future: Future = Future()
        self.thread_id = threading.get_ident()


_Slot = Union[CacheEntry, _Pending]
_MISSING = object()


class ReferenceConcurrentCache(Generic[K, V]):
    """Thread-safe mapping from weakly held keys to strongly held values.

    Parameters
    ----------
    policy:
        :attr:`ReferencePolicy.WEAK` or :attr:`ReferencePolicy.SOFT`.
        ``PHANTOM_LIKE`` wrappers cannot hand their key back, so they
        cannot serve lookups and are rejected.
    channel:
        Where reclaimed references are reported.  May be shared with other
        caches; a private channel is created when omitted.
    name:
        Label used for statistics and logging.
    stats:
        Optional collector for hit/miss/computation/reclaim counters.
    purge_batch_size:
        Maximum notifications drained by the opportunistic purge inside
        each operation.
    """

    def __init__(
        self,
        policy: ReferencePolicy,
        channel: Optional[ReclamationChannel] = None,
        *,
        name: Optional[str] = None,
        stats: Optional[CacheStatsCollector] = None,
        purge_batch_size: int = PURGE_BATCH_SIZE,
    ) -> None:
        if not isinstance(policy, ReferencePolicy):
            raise InvalidPolicyError(f"Unknown reference policy: {policy!r}")
        if not policy.readable:
            raise InvalidPolicyError(
                f"{policy.name} references cannot read their key back and cannot back a lookup cache"
            )
        self._policy = policy
        self._channel = channel if channel is not None else ReclamationChannel()
        self._owner = self._channel.new_owner()
        weakref.finalize(self, self._channel.retire, self._owner)
        self._name = name or f"{policy.value}-cache-{self._owner}"
        self._stats = stats
        self._purge_batch_size = max(1, purge_batch_size)
        self._store: Dict[TrackedReference[K], _Slot] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def policy(self) -> ReferencePolicy:
        return self._policy

    @property
    def channel(self) -> ReclamationChannel:
        return self._channel

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Return the value cached for *key*, or *default*.

        Entries still being computed count as absent.
        """
        probe = self._probe(key)
        self._expunge(self._purge_batch_size)
        with self._lock:
            slot = self._store.get(probe)
        if isinstance(slot, CacheEntry):
            self._record_hit()
            return slot.value
        self._record_miss()
        return default

    def put(self, key: K, value: V) -> None:
        """Store *value* under *key*, replacing any entry for an equal live key."""
        ref = self._track(key)
        self._expunge(self._purge_batch_size)
        with self._lock:
            previous = self._store.pop(ref, None)
            self._store[ref] = CacheEntry(ref, value)
        if previous is not None:
            previous.reference.detach()

    def compute_if_absent(self, key: K, supplier: Callable[[K], V]) -> V:
        """Return the value for *key*, calling ``supplier(key)`` if it is missing.

        Concurrent callers for the same live key share one invocation of
        *supplier*.  If *supplier* raises, nothing is cached, the error
        propagates to the caller that ran it, and waiting callers retry.
        """
        probe = self._probe(key)
        self._expunge(self._purge_batch_size)
        while True:
            with self._lock:
                slot = self._store.get(probe, _MISSING)
                if slot is _MISSING:
                    pending = _Pending(self._track(key))
                    self._store[pending.reference] = pending
                elif isinstance(slot, _Pending):
                    if slot.thread_id == threading.get_ident():
                        raise RecursiveComputationError(
                            f"Supplier for {key!r} re-entered {self._name} for the same key"
                        )
                    pending = None
                else:
                    pending = None

            if isinstance(slot, CacheEntry):
                self._record_hit()
                return slot.value
            if pending is not None:
                self._record_miss()
                return self._run(key, supplier, pending)
            try:
                return slot.future.result()
            except _Abandoned:
                continue

    def remove(self, key: K) -> Optional[V]:
        """Drop the entry for *key*; return its value if it had one."""
        probe = self._probe(key)
        self._expunge(self._purge_batch_size)
        with self._lock:
            slot = self._store.pop(probe, None)
        if slot is None:
            return None
        slot.reference.detach()
        return slot.value if isinstance(slot, CacheEntry) else None

    def purge_stale(self) -> int:
        """Drop every entry whose key has been reclaimed; return how many."""
        return self._expunge(None)

    def relieve_memory_pressure(self) -> int:
        """Let every SOFT key become collectable; return how many were softened."""
        if not self._policy.holds_strongly:
            return 0
        softened = 0
        with self._lock:
            for ref in self._store:
                if not ref.softened:
                    ref.soften()
                    softened += 1
        if softened:
            LOGGER.info("%s: released %d soft reference(s) under memory pressure", self._name, softened)
        return softened

    def size(self) -> int:
        """Number of stored entries, including reclaimed ones not yet purged."""
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        with self._lock:
            refs = list(self._store)
            self._store.clear()
        for ref in refs:
            ref.detach()
        self._channel.discard(self._owner)

    def keys(self) -> List[K]:
        """Snapshot of the live keys with a published value."""
        return [entry.key for entry in self.entries()]

    def entries(self) -> List[CacheEntry[K, V]]:
        """Snapshot of published entries whose key is still alive."""
        with self._lock:
            slots = list(self._store.values())
        return [slot for slot in slots if isinstance(slot, CacheEntry) and slot.reference.alive]

    def __contains__(self, key: object) -> bool:
        probe = self._probe(key)
        self._expunge(self._purge_batch_size)
        with self._lock:
            return isinstance(self._store.get(probe), CacheEntry)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, policy={self._policy.name}, size={self.size()})"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _probe(self, key: K) -> TrackedReference[K]:
        """Lookup-only wrapper; validates *key* and never reports reclamation."""
        return TrackedReference.wrap(key, ReferencePolicy.WEAK)

    def _track(self, key: K) -> TrackedReference[K]:
        return TrackedReference.wrap(key, self._policy, self._channel, self._owner)

    def _run(self, key: K, supplier: Callable[[K], V], pending: _Pending) -> V:
        if self._stats is not None:
            self._stats.record_computation(self._name)
        try:
            value = supplier(key)
        except BaseException:
            with self._lock:
                if self._store.get(pending.reference) is pending:
                    del self._store[pending.reference]
            pending.reference.detach()
            pending.future.set_exception(_Abandoned())
            LOGGER.debug("%s: supplier for %r failed; nothing cached", self._name, key)
            raise

        with self._lock:
            if self._store.get(pending.reference) is pending:
                self._store[pending.reference] = CacheEntry(pending.reference, value)
        pending.future.set_result(value)
        return value

    def _expunge(self, limit: Optional[int]) -> int:
        stale = self._channel.drain(self._owner, limit)
        if not stale:
            return 0
        removed = 0
        with self._lock:
            for ref in stale:
                slot = self._store.get(ref)
                if slot is not None and slot.reference is ref:
                    del self._store[ref]
                    removed += 1
        if removed:
            LOGGER.debug("%s: purged %d reclaimed entr%s", self._name, removed, "y" if removed == 1 else "ies")
            if self._stats is not None:
                self._stats.record_reclaimed(self._name, removed)
        return removed

    def _record_hit(self) -> None:
        if self._stats is not None:
            self._stats.record_hit(self._name)

    def _record_miss(self) -> None:
        if self._stats is not None:
            self._stats.record_miss(self._name)
