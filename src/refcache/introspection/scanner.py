"""Uncached scans of the members a type declares."""

from __future__ import annotations

import inspect
from typing import Any, Iterator, Optional, Tuple

from .models import FieldInfo, MethodInfo

_NO_ANNOTATION = inspect.Parameter.empty


def _hierarchy(cls: type, include_bases: bool) -> Iterator[type]:
    if not include_bases:
        yield cls
        return
    for klass in cls.__mro__:
        if klass is object and cls is not object:
            continue
        yield klass


def _format_annotation(annotation: Any) -> Optional[str]:
    if annotation is _NO_ANNOTATION:
        return None
    if isinstance(annotation, str):
        return annotation
    return inspect.formatannotation(annotation)


def _is_data_attribute(name: str, value: Any) -> bool:
    if name.startswith("__") and name.endswith("__"):
        return False
    if isinstance(value, (staticmethod, classmethod, property, type)):
        return False
    return not callable(value)


def scan_fields_directly(cls: type, include_bases: bool = True) -> Tuple[FieldInfo, ...]:
    """Return the data attributes declared by *cls*, subclass first.

    Annotated names come first in annotation order, followed by plain
    class-level data attributes.  A name declared by both a subclass and a
    base appears once per declaring type.
    """
    fields: list[FieldInfo] = []
    for klass in _hierarchy(cls, include_bases):
        namespace = vars(klass)
        annotations = inspect.get_annotations(klass)
        for name, annotation in annotations.items():
            fields.append(
                FieldInfo(
                    name=name,
                    annotation=_format_annotation(annotation),
                    has_default=name in namespace,
                    declared_in=klass.__qualname__,
                )
            )
        for name, value in namespace.items():
            if name in annotations or not _is_data_attribute(name, value):
                continue
            fields.append(
                FieldInfo(name=name, annotation=None, has_default=True, declared_in=klass.__qualname__)
            )
    return tuple(fields)


def _describe(name: str, member: Any, owner: str) -> Optional[MethodInfo]:
    if isinstance(member, staticmethod):
        kind, func, bound = "staticmethod", member.__func__, False
    elif isinstance(member, classmethod):
        kind, func, bound = "classmethod", member.__func__, True
    elif isinstance(member, property):
        kind, func, bound = "property", member.fget, True
    elif inspect.isfunction(member):
        kind, func, bound = "method", member, True
    else:
        return None

    if func is None:
        return MethodInfo(name=name, kind=kind, signature="()", parameter_count=0, declared_in=owner)
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return MethodInfo(name=name, kind=kind, signature="(...)", parameter_count=-1, declared_in=owner)
    count = len(signature.parameters)
    if bound and count:
        count -= 1
    return MethodInfo(
        name=name,
        kind=kind,
        signature=str(signature),
        parameter_count=count,
        declared_in=owner,
    )


def scan_methods_directly(cls: type, include_bases: bool = True) -> Tuple[MethodInfo, ...]:
    """Return the functions, class/static methods and properties declared by *cls*."""
    methods: list[MethodInfo] = []
    for klass in _hierarchy(cls, include_bases):
        for name, member in vars(klass).items():
            info = _describe(name, member, klass.__qualname__)
            if info is not None:
                methods.append(info)
    return tuple(methods)
