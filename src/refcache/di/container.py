from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Type

from .lifetime import Lifetime
from ..errors import CircularDependencyError, ResolutionError


@dataclass
class Registration:
    interface: Type
    implementation: Optional[Type] = None
    lifetime: Lifetime = Lifetime.TRANSIENT
    factory: Optional[Callable[["Container"], Any]] = None
    kwargs: Dict[str, Any] = field(default_factory=dict)


class Container:
    """Explicit registry for the process-wide cache infrastructure.

    Factories receive the container so they can resolve their own
    collaborators (e.g. every cache resolves the shared reclamation channel).
    """

    def __init__(self):
        self._registrations: Dict[Type, Registration] = {}
        self._singleton_instances: Dict[Type, Any] = {}
        self._resolving: Set[Type] = set()

    # --- Registration API ---

    def register_singleton(
        self,
        interface: Type,
        implementation: Optional[Type] = None,
        factory: Optional[Callable[["Container"], Any]] = None,
        **kwargs,
    ):
        self._registrations[interface] = Registration(
            interface=interface,
            implementation=implementation or interface,
            lifetime=Lifetime.SINGLETON,
            factory=factory,
            kwargs=kwargs,
        )

    def register_transient(self, interface: Type, implementation: Optional[Type] = None, **kwargs):
        self._registrations[interface] = Registration(
            interface=interface,
            implementation=implementation or interface,
            lifetime=Lifetime.TRANSIENT,
            kwargs=kwargs,
        )

    def register_factory(self, interface: Type, factory: Callable[["Container"], Any]):
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.TRANSIENT,
            factory=factory,
        )

    def register_instance(self, interface: Type, instance: Any):
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.SINGLETON,
        )
        self._singleton_instances[interface] = instance

    # --- Resolution ---

    def resolve(self, interface: Type) -> Any:
        if interface not in self._registrations:
            raise ResolutionError(f"No registration found for {interface}")
        if interface in self._resolving:
            raise CircularDependencyError(
                f"Circular dependency detected for {interface}"
            )
        self._resolving.add(interface)
        try:
            reg = self._registrations[interface]
            if reg.lifetime == Lifetime.SINGLETON:
                if interface not in self._singleton_instances:
                    self._singleton_instances[interface] = self._create(reg)
                return self._singleton_instances[interface]
            return self._create(reg)
        finally:
            self._resolving.discard(interface)

    # --- Helpers ---

    def _create(self, reg: Registration) -> Any:
        if reg.factory:
            return reg.factory(self)
        impl = reg.implementation or reg.interface
        return impl(**reg.kwargs)
