"""Plain-data descriptions of members declared by a type.

These records are what the metadata caches store.  They deliberately hold
names and strings instead of the member objects: a function or descriptor
can reach its owning class (closures, ``__objclass__``), and a cached value
that reaches its key keeps that key alive forever.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldInfo:
    name: str
    annotation: str | None
    has_default: bool
    declared_in: str

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")


@dataclass(frozen=True)
class MethodInfo:
    name: str
    kind: str
    """One of ``"method"``, ``"classmethod"``, ``"staticmethod"``, ``"property"``."""
    signature: str
    parameter_count: int
    declared_in: str

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def takes_no_arguments(self) -> bool:
        """True when the member can be called without arguments beyond the receiver."""
        return self.parameter_count == 0
