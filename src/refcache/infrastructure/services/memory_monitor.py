"""Process memory monitor that relieves soft caches under pressure.

Python has no soft references, so SOFT caches hold their keys strongly
until someone reports memory pressure.  :class:`MemoryMonitor` is that
someone: it samples process RSS when polled and, on crossing the critical
threshold, tells every watched cache to release its soft keys.  Designed to
be polled (e.g. from a timer or after a batch of work) rather than running
its own loop.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Callable, List, Protocol

from ...config import MEMORY_CRITICAL_BYTES, MEMORY_WARNING_BYTES

LOGGER = logging.getLogger(__name__)

# 1 MiB / 1 GiB in bytes, handy for callers constructing thresholds.
MiB: int = 1 << 20
GiB: int = 1 << 30


class PressureRelievable(Protocol):
    def relieve_memory_pressure(self) -> int: ...


@dataclass
class MemorySnapshot:
    """Point-in-time memory reading."""

    rss_bytes: int = 0
    """Resident Set Size in bytes."""

    @property
    def rss_mib(self) -> float:
        return self.rss_bytes / MiB


MemoryCallback = Callable[[MemorySnapshot], None]


class MemoryMonitor:
    """Track process memory and fire callbacks on threshold breach.

    Parameters
    ----------
    warning_bytes:
        When RSS exceeds this value, ``on_warning`` callbacks fire.
    critical_bytes:
        When RSS exceeds this value, watched caches are relieved and
        ``on_critical`` callbacks fire.
    """

    def __init__(
        self,
        warning_bytes: int = MEMORY_WARNING_BYTES,
        critical_bytes: int = MEMORY_CRITICAL_BYTES,
    ) -> None:
        self._warning_bytes = warning_bytes
        self._critical_bytes = critical_bytes

        self._on_warning: List[MemoryCallback] = []
        self._on_critical: List[MemoryCallback] = []
        self._watched: List[PressureRelievable] = []

        self._lock = threading.Lock()
        self._last_snapshot = MemorySnapshot()
        self._warning_fired = False
        self._critical_fired = False

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_warning_callback(self, cb: MemoryCallback) -> None:
        with self._lock:
            self._on_warning.append(cb)

    def add_critical_callback(self, cb: MemoryCallback) -> None:
        with self._lock:
            self._on_critical.append(cb)

    def watch(self, cache: PressureRelievable) -> None:
        """Relieve *cache* whenever the critical threshold is crossed."""
        with self._lock:
            self._watched.append(cache)

    @property
    def warning_bytes(self) -> int:
        return self._warning_bytes

    @property
    def critical_bytes(self) -> int:
        return self._critical_bytes

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def check(self) -> MemorySnapshot:
        """Sample current RSS and react if thresholds are crossed.

        Returns the latest :class:`MemorySnapshot`.
        """
        snap = self._read_rss()
        with self._lock:
            self._last_snapshot = snap
            fire_critical = self._crossed(snap, self._critical_bytes, "_critical_fired")
            fire_warning = self._crossed(snap, self._warning_bytes, "_warning_fired")
            critical = list(self._on_critical) if fire_critical else []
            warning = list(self._on_warning) if fire_warning else []
            watched = list(self._watched) if fire_critical else []

        if fire_critical:
            LOGGER.warning(
                "Memory CRITICAL: %.1f MiB (threshold %.1f MiB)",
                snap.rss_mib,
                self._critical_bytes / MiB,
            )
            released = sum(cache.relieve_memory_pressure() for cache in watched)
            LOGGER.info("Released %d soft cache key(s)", released)
        elif fire_warning:
            LOGGER.warning(
                "Memory WARNING: %.1f MiB (threshold %.1f MiB)",
                snap.rss_mib,
                self._warning_bytes / MiB,
            )

        for cb in critical + warning:
            try:
                cb(snap)
            except Exception:
                LOGGER.exception("Error in memory callback")
        return snap

    def relieve_now(self) -> int:
        """Relieve every watched cache regardless of current usage."""
        with self._lock:
            watched = list(self._watched)
        return sum(cache.relieve_memory_pressure() for cache in watched)

    @property
    def last_snapshot(self) -> MemorySnapshot:
        with self._lock:
            return self._last_snapshot

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _crossed(self, snap: MemorySnapshot, threshold: int, flag: str) -> bool:
        """Return True the first time *threshold* is reached; re-arm below it."""
        if snap.rss_bytes >= threshold:
            if getattr(self, flag):
                return False
            setattr(self, flag, True)
            return True
        setattr(self, flag, False)
        return False

    @staticmethod
    def _read_rss() -> MemorySnapshot:
        """Read the current process RSS from ``/proc/self/status`` or
        :mod:`resource` (peak RSS) where procfs is unavailable.
        """
        try:
            with open("/proc/self/status") as f:
                for line in f:
                    if line.startswith("VmRSS:"):
                        # Value is in kB
                        return MemorySnapshot(rss_bytes=int(line.split()[1]) * 1024)
        except OSError:
            pass
        if sys.platform == "win32":
            return MemorySnapshot()
        import resource

        rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # ru_maxrss is in KB on Linux, bytes on macOS
        if sys.platform != "darwin":
            rss *= 1024
        return MemorySnapshot(rss_bytes=rss)
