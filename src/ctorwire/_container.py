from __future__ import annotations

import contextlib
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from . import _errors as errors
from ._constructors import ConstructorCatalog
from ._descriptor import Binder, Descriptor, Lifetime, LifetimeSetter, register
from ._registry import Registry
from ._resolver import Resolver
from ._scope import Scope, ScopeManager
from ._types import is_instance_of, is_valid_dependency_type


if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable, Iterator

T = TypeVar("T")


class Container:
    """Constructor-injection DI container.

    - bind dependency types to resolving types or zero-argument factories
    - resolve with constructor injection, picking the richest constructor
    - lifetimes: transient / singleton / scoped
    - scopes for per-request or per-unit-of-work sharing.

    Create one container at the application's composition root and pass it
    to whatever needs it; there is no global instance.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._registry = Registry(self._lock)
        self._scopes = ScopeManager(self._lock)
        self._catalog = ConstructorCatalog()
        self._resolver = Resolver(self._registry, self._catalog)

    def bind(self, dependency_type: type[T]) -> Binder[T]:
        """Start a binding for ``dependency_type``.

        Example:
          container.bind(Logger).to(ConsoleLogger).as_singleton()
          container.bind(Repo).to(SqlRepo).as_scoped()

        """
        return Binder(self._registry, dependency_type)

    def register(self, concrete_type: type[T], factory: Callable[[], T] | None = None) -> LifetimeSetter[T]:
        """Bind a type to itself.

        Example:
          container.register(Clock).as_singleton()
          container.register(Settings, lambda: Settings.from_env()).as_singleton()

        """
        return register(self._registry, concrete_type, factory)

    def register_instance(self, dependency_type: type[T], instance: T) -> None:
        """Register a pre-built instance (always singleton)."""
        if not is_valid_dependency_type(dependency_type):
            msg = errors.DEPENDENCY_TYPE_NOT_VALID.format(errors.type_name(dependency_type))
            raise errors.InvalidDependencyType(msg, dependency_type=dependency_type)

        if not is_instance_of(instance, dependency_type):
            msg = errors.INCOMPATIBLE_INSTANCE.format(
                errors.type_name(type(instance)), errors.type_name(dependency_type)
            )
            raise errors.IncompatibleResolvingType(
                msg, dependency_type=dependency_type, resolving_type=type(instance)
            )

        descriptor: Descriptor[T] = Descriptor(
            dependency_type=dependency_type,
            resolving_type=type(instance),
            lifetime=Lifetime.SINGLETON,
        )
        descriptor.store_singleton(instance)
        self._registry.add(descriptor)

    def get_descriptor(self, dependency_type: type[T]) -> Descriptor[T] | None:
        return self._registry.get(dependency_type)

    def is_registered(self, dependency_type: object) -> bool:
        return dependency_type in self._registry

    @overload
    def resolve(self, dependency_type: type[T]) -> T: ...

    @overload
    def resolve(self, dependency_type: Any) -> Any: ...

    def resolve(self, dependency_type: Any) -> Any:
        """Resolve outside of any scope.

        Transient and singleton dependencies only; a scoped dependency anywhere
        in the graph raises ``OutsideScopeError``.
        """
        return self._resolver.resolve(dependency_type)

    def create_scope(self) -> Scope:
        """Open a new scope. Dispose it (or use it as a context manager) when done."""
        return self._scopes.create(self._resolver)

    @contextlib.contextmanager
    def scope(self) -> Iterator[Scope]:
        """Open a scope for the duration of a ``with`` block."""
        active = self.create_scope()
        try:
            yield active
        finally:
            active.dispose()

    def get_scope(self, scope_id: uuid.UUID) -> Scope | None:
        return self._scopes.get(scope_id)

    @property
    def active_scope_ids(self) -> frozenset[uuid.UUID]:
        return self._scopes.ids()
