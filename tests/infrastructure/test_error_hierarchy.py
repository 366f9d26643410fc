"""Tests for the custom error hierarchy."""

import pytest

from refcache.errors import (
    CacheError,
    CircularDependencyError,
    InvalidKeyError,
    InvalidPolicyError,
    RecursiveComputationError,
    RefCacheError,
    ResolutionError,
    SettingsError,
    SettingsLoadError,
    SettingsValidationError,
)


@pytest.mark.parametrize(
    "error_cls",
    [InvalidKeyError, InvalidPolicyError, RecursiveComputationError],
)
def test_cache_errors(error_cls):
    assert issubclass(error_cls, CacheError)
    assert isinstance(error_cls("x"), RefCacheError)


@pytest.mark.parametrize("error_cls", [SettingsLoadError, SettingsValidationError])
def test_settings_errors(error_cls):
    assert issubclass(error_cls, SettingsError)
    assert issubclass(error_cls, RefCacheError)


@pytest.mark.parametrize("error_cls", [CircularDependencyError, ResolutionError])
def test_di_errors(error_cls):
    assert issubclass(error_cls, RefCacheError)
    assert not issubclass(error_cls, CacheError)


def test_catch_all_with_base():
    with pytest.raises(RefCacheError):
        raise InvalidKeyError("None cannot be used as a cache key")
