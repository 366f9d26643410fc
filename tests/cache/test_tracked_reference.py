"""Tests for TrackedReference: frozen hashing and liveness-aware equality."""

from __future__ import annotations

import gc

import pytest

from refcache.cache import ReclamationChannel, ReferencePolicy, TrackedReference
from refcache.errors import InvalidKeyError


class _Key:
    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, _Key) and other.name == self.name

    def __hash__(self):
        return hash(self.name)


class TestWrap:
    def test_read_returns_live_key(self):
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.WEAK)
        assert ref.read() is key
        assert ref.alive

    def test_hash_is_captured_at_wrap_time(self):
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.WEAK)
        expected = hash(key)
        del key
        gc.collect()
        assert ref.read() is None
        assert hash(ref) == expected

    @pytest.mark.parametrize("bad", [None, 42, "text", [1, 2]])
    def test_rejects_untrackable_keys(self, bad):
        with pytest.raises(InvalidKeyError):
            TrackedReference.wrap(bad, ReferencePolicy.WEAK)

    def test_phantom_never_reads_key(self):
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.PHANTOM_LIKE)
        assert ref.read() is None
        assert ref.alive

    def test_soft_holds_key_until_softened(self):
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.SOFT)
        del key
        gc.collect()
        assert ref.read() == _Key("a")
        ref.soften()
        gc.collect()
        assert ref.read() is None


class TestEquality:
    def test_equal_live_keys_make_equal_references(self):
        k1, k2 = _Key("a"), _Key("a")
        r1 = TrackedReference.wrap(k1, ReferencePolicy.WEAK)
        r2 = TrackedReference.wrap(k2, ReferencePolicy.WEAK)
        assert r1 == r2
        assert hash(r1) == hash(r2)

    def test_different_keys_are_not_equal(self):
        k1, k2 = _Key("a"), _Key("b")
        assert TrackedReference.wrap(k1, ReferencePolicy.WEAK) != TrackedReference.wrap(
            k2, ReferencePolicy.WEAK
        )

    def test_cleared_reference_equals_only_itself(self):
        k1, k2 = _Key("a"), _Key("a")
        dead = TrackedReference.wrap(k1, ReferencePolicy.WEAK)
        other_dead = TrackedReference.wrap(_Key("a"), ReferencePolicy.WEAK)
        live = TrackedReference.wrap(k2, ReferencePolicy.WEAK)
        del k1
        gc.collect()
        assert dead == dead
        assert dead != other_dead
        assert dead != live
        assert live != dead

    def test_phantom_equals_only_itself(self):
        key = _Key("a")
        p1 = TrackedReference.wrap(key, ReferencePolicy.PHANTOM_LIKE)
        p2 = TrackedReference.wrap(key, ReferencePolicy.PHANTOM_LIKE)
        assert p1 == p1
        assert p1 != p2

    def test_dead_reference_still_locatable_in_dict(self):
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.WEAK)
        store = {ref: "value"}
        del key
        gc.collect()
        assert store.pop(ref) == "value"


class TestNotification:
    def test_collection_is_reported_to_channel(self):
        channel = ReclamationChannel()
        owner = channel.new_owner()
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.WEAK, channel, owner)
        del key
        gc.collect()
        assert channel.drain(owner) == [ref]

    def test_detached_reference_is_not_reported(self):
        channel = ReclamationChannel()
        owner = channel.new_owner()
        key = _Key("a")
        ref = TrackedReference.wrap(key, ReferencePolicy.WEAK, channel, owner)
        ref.detach()
        del key
        gc.collect()
        assert channel.pending(owner) == 0
