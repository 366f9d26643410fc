"""Custom exception hierarchy for refcache."""

from __future__ import annotations


class RefCacheError(Exception):
    """Base class for all custom errors raised by refcache."""


# --- Cache errors ---

class CacheError(RefCacheError):
    """Base class for errors raised by the reference caches."""


class InvalidKeyError(CacheError):
    """Raised when a key cannot be tracked (``None``, unhashable or not weak-referenceable)."""


class InvalidPolicyError(CacheError):
    """Raised when a cache is constructed with a policy it cannot serve lookups for."""


class RecursiveComputationError(CacheError):
    """Raised when a supplier asks the cache for the key it is computing."""


# --- DI-specific errors ---

class CircularDependencyError(RefCacheError):
    """Raised when a circular dependency is detected during resolution."""


class ResolutionError(RefCacheError):
    """Raised when a dependency cannot be resolved."""


# --- Settings errors ---

class SettingsError(RefCacheError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
