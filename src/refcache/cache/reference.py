"""Hashable wrapper around a key that the cache must not keep alive."""

from __future__ import annotations

import weakref
from typing import Any, Generic, Optional, TypeVar

from ..errors import InvalidKeyError
from .channel import ReclamationChannel
from .policy import ReferencePolicy

K = TypeVar("K")


class TrackedReference(Generic[K]):
    """A weak handle on *key* usable as a dict key.

    The hash is captured when the wrapper is built so that an entry stays
    locatable after its key has been collected.  Equality follows the key
    while both sides are alive; a cleared wrapper is equal only to itself.

    Build instances with :meth:`wrap`.
    """

    __slots__ = ("policy", "identity_hash", "owner", "_ref", "_strong", "_channel", "__weakref__")

    def __init__(
        self,
        key: K,
        policy: ReferencePolicy,
        channel: Optional[ReclamationChannel] = None,
        owner: int = 0,
    ) -> None:
        if key is None:
            raise InvalidKeyError("None cannot be used as a cache key")
        try:
            identity_hash = hash(key)
        except TypeError as exc:
            raise InvalidKeyError(f"Unhashable key of type {type(key).__name__}") from exc

        self.policy = policy
        self.identity_hash = identity_hash
        self.owner = owner
        self._channel = channel
        callback = self._on_reclaimed if channel is not None else None
        try:
            self._ref = weakref.ref(key, callback)
        except TypeError as exc:
            raise InvalidKeyError(
                f"Key of type {type(key).__name__} does not support weak references"
            ) from exc
        self._strong: Optional[K] = key if policy.holds_strongly else None

    @classmethod
    def wrap(
        cls,
        key: K,
        policy: ReferencePolicy,
        channel: Optional[ReclamationChannel] = None,
        owner: int = 0,
    ) -> "TrackedReference[K]":
        """Wrap *key*, reporting its collection to *channel* under *owner*."""
        return cls(key, policy, channel, owner)

    # ------------------------------------------------------------------
    # Liveness
    # ------------------------------------------------------------------

    def read(self) -> Optional[K]:
        """Return the key, or ``None`` once reclaimed (always for PHANTOM_LIKE)."""
        if not self.policy.readable:
            return None
        return self._ref()

    @property
    def alive(self) -> bool:
        return self._ref() is not None

    @property
    def softened(self) -> bool:
        return self._strong is None

    def soften(self) -> None:
        """Drop the strong hold of a SOFT wrapper; a no-op for other policies."""
        self._strong = None

    def detach(self) -> None:
        """Stop reporting to the channel.  Used when the entry is removed explicitly."""
        self._channel = None

    def _on_reclaimed(self, _ref: weakref.ref) -> None:
        channel = self._channel
        if channel is not None:
            channel.enqueue(self)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __hash__(self) -> int:
        return self.identity_hash

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, TrackedReference):
            return NotImplemented
        if self.identity_hash != other.identity_hash:
            return False
        mine = self.read()
        if mine is None:
            return False
        theirs = other.read()
        if theirs is None:
            return False
        return mine is theirs or mine == theirs

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self) -> str:
        state = "alive" if self.alive else "cleared"
        return f"TrackedReference({self.policy.value}, hash={self.identity_hash}, {state})"
