"""Cached member lookups keyed by type.

:class:`MetadataLookup` is the collaborator the caches exist for: scanning a
type's members is comparatively slow, so the full scan is cached per type
in a weak cache and discarded when the type itself goes away.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence, Set, Tuple

from ..cache import ReferenceConcurrentCache
from ..errors import InvalidKeyError
from .models import FieldInfo, MethodInfo
from .scanner import scan_fields_directly, scan_methods_directly

LOGGER = logging.getLogger(__name__)


def _require_type(cls: object) -> type:
    if not isinstance(cls, type):
        raise InvalidKeyError(f"Expected a type, got {type(cls).__name__}")
    return cls


class MetadataLookup:
    """Field and method metadata for types, cached by the given caches.

    Both caches are supplied by the caller, normally from a
    :class:`~refcache.appctx.CacheContext`, so every lookup in a process
    shares the same storage.
    """

    def __init__(
        self,
        fields_cache: ReferenceConcurrentCache[type, Tuple[FieldInfo, ...]],
        methods_cache: ReferenceConcurrentCache[type, Tuple[MethodInfo, ...]],
    ) -> None:
        self._fields = fields_cache
        self._methods = methods_cache

    @property
    def fields_cache(self) -> ReferenceConcurrentCache[type, Tuple[FieldInfo, ...]]:
        return self._fields

    @property
    def methods_cache(self) -> ReferenceConcurrentCache[type, Tuple[MethodInfo, ...]]:
        return self._methods

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def declared_fields(
        self,
        cls: type,
        include_bases: bool = True,
        predicate: Optional[Callable[[FieldInfo], bool]] = None,
    ) -> Tuple[FieldInfo, ...]:
        """Fields of *cls*, subclass first; cached when *include_bases* is set."""
        _require_type(cls)
        if include_bases:
            fields = self._fields.compute_if_absent(cls, _scan_fields)
        else:
            fields = scan_fields_directly(cls, include_bases=False)
        if predicate is None:
            return fields
        return tuple(info for info in fields if predicate(info))

    def field(self, cls: type, name: str) -> Optional[FieldInfo]:
        """The first field called *name* in the hierarchy of *cls*."""
        for info in self.declared_fields(cls):
            if info.name == name:
                return info
        return None

    def has_field(self, cls: type, name: str) -> bool:
        return self.field(cls, name) is not None

    def field_map(self, cls: type) -> Dict[str, FieldInfo]:
        """Name to field, the most derived declaration winning."""
        mapping: Dict[str, FieldInfo] = {}
        for info in self.declared_fields(cls):
            mapping.setdefault(info.name, info)
        return mapping

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def declared_methods(
        self,
        cls: type,
        include_bases: bool = True,
        predicate: Optional[Callable[[MethodInfo], bool]] = None,
    ) -> Tuple[MethodInfo, ...]:
        _require_type(cls)
        if include_bases:
            methods = self._methods.compute_if_absent(cls, _scan_methods)
        else:
            methods = scan_methods_directly(cls, include_bases=False)
        if predicate is None:
            return methods
        return tuple(info for info in methods if predicate(info))

    def public_methods(self, cls: type, exclude: Sequence[str] = ()) -> Tuple[MethodInfo, ...]:
        excluded = set(exclude)
        return self.declared_methods(
            cls, predicate=lambda info: info.is_public and info.name not in excluded
        )

    def method(self, cls: type, name: str, ignore_case: bool = False) -> Optional[MethodInfo]:
        """The first member called *name* in the hierarchy of *cls*."""
        wanted = name.lower() if ignore_case else name
        for info in self.declared_methods(cls):
            candidate = info.name.lower() if ignore_case else info.name
            if candidate == wanted:
                return info
        return None

    def has_method(self, cls: type, name: str) -> bool:
        return self.method(cls, name) is not None

    def method_names(self, cls: type) -> Set[str]:
        return {info.name for info in self.declared_methods(cls)}


def _scan_fields(cls: type) -> Tuple[FieldInfo, ...]:
    LOGGER.debug("Scanning fields of %s", cls.__qualname__)
    return scan_fields_directly(cls, include_bases=True)


def _scan_methods(cls: type) -> Tuple[MethodInfo, ...]:
    LOGGER.debug("Scanning methods of %s", cls.__qualname__)
    return scan_methods_directly(cls, include_bases=True)
