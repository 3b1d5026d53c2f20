from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Set, Type

from ..errors import CircularDependencyError, ResolutionError


class Lifetime(Enum):
    SINGLETON = auto()
    TRANSIENT = auto()


@dataclass
class Registration:
    interface: Type
    implementation: Optional[Type] = None
    lifetime: Lifetime = Lifetime.TRANSIENT
    factory: Optional[Callable[[], Any]] = None
    kwargs: Dict[str, Any] = field(default_factory=dict)


class Container:
    """Minimal service container keyed by interface type."""

    def __init__(self):
        self._registrations: Dict[Type, Registration] = {}
        self._singleton_instances: Dict[Type, Any] = {}
        self._resolving: Set[Type] = set()

    def register_singleton(self, interface: Type, implementation: Optional[Type] = None, **kwargs):
        self._registrations[interface] = Registration(
            interface=interface,
            implementation=implementation or interface,
            lifetime=Lifetime.SINGLETON,
            kwargs=kwargs,
        )
        self._singleton_instances.pop(interface, None)

    def register_transient(self, interface: Type, implementation: Optional[Type] = None, **kwargs):
        self._registrations[interface] = Registration(
            interface=interface,
            implementation=implementation or interface,
            lifetime=Lifetime.TRANSIENT,
            kwargs=kwargs,
        )

    def register_factory(self, interface: Type, factory: Callable[[], Any], singleton: bool = False):
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.SINGLETON if singleton else Lifetime.TRANSIENT,
            factory=factory,
        )
        self._singleton_instances.pop(interface, None)

    def register_instance(self, interface: Type, instance: Any):
        self._registrations[interface] = Registration(interface=interface, lifetime=Lifetime.SINGLETON)
        self._singleton_instances[interface] = instance

    def is_registered(self, interface: Type) -> bool:
        return interface in self._registrations

    def resolve(self, interface: Type) -> Any:
        if interface not in self._registrations:
            raise ResolutionError(f"No registration found for {interface}")
        if interface in self._resolving:
            raise CircularDependencyError(f"Circular dependency detected for {interface}")
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

    def _create(self, reg: Registration) -> Any:
        if reg.factory:
            return reg.factory()
        impl = reg.implementation or reg.interface
        return impl(**reg.kwargs)
