from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from . import _errors as errors
from ._types import is_assignable, is_concrete, is_interface, is_valid_dependency_type


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._registry import Registry

T = TypeVar("T")

_EMPTY: Any = object()


class Lifetime(Enum):
    UNDEFINED = "undefined"
    TRANSIENT = "transient"
    SINGLETON = "singleton"
    SCOPED = "scoped"


@dataclass(eq=False)
class Descriptor(Generic[T]):
    """Binding of a dependency type to its resolving type, factory and lifetime."""

    dependency_type: Any
    resolving_type: Any
    factory: Callable[[], T] | None = None
    lifetime: Lifetime = Lifetime.UNDEFINED
    _singleton_instance: Any = field(default=_EMPTY, repr=False)

    @property
    def has_singleton_instance(self) -> bool:
        return self._singleton_instance is not _EMPTY

    @property
    def singleton_instance(self) -> T | None:
        """The cached singleton, or None while it has not been built."""
        if self._singleton_instance is _EMPTY:
            return None
        return self._singleton_instance

    def store_singleton(self, instance: T) -> T:
        """Fill the singleton slot once; later calls keep the first value.

        Callers must hold the registry lock.
        """
        if self._singleton_instance is _EMPTY:
            self._singleton_instance = instance
        return self._singleton_instance


class LifetimeSetter(Generic[T]):
    """Final step of a binding: choosing the lifetime commits it to the registry."""

    def __init__(
        self,
        registry: Registry,
        dependency_type: Any,
        resolving_type: Any,
        factory: Callable[[], T] | None,
    ) -> None:
        self._registry = registry
        self._dependency_type = dependency_type
        self._resolving_type = resolving_type
        self._factory = factory

    def as_transient(self) -> None:
        self._commit(Lifetime.TRANSIENT)

    def as_singleton(self) -> None:
        self._commit(Lifetime.SINGLETON)

    def as_scoped(self) -> None:
        self._commit(Lifetime.SCOPED)

    def _commit(self, lifetime: Lifetime) -> None:
        descriptor: Descriptor[T] = Descriptor(
            dependency_type=self._dependency_type,
            resolving_type=self._resolving_type,
            factory=self._factory,
            lifetime=lifetime,
        )
        self._registry.add(descriptor)


class Binder(Generic[T]):
    """Returned by ``Container.bind``; names the resolving type for a dependency type."""

    def __init__(self, registry: Registry, dependency_type: Any) -> None:
        if not is_valid_dependency_type(dependency_type):
            msg = errors.DEPENDENCY_TYPE_NOT_VALID.format(errors.type_name(dependency_type))
            raise errors.InvalidDependencyType(msg, dependency_type=dependency_type)
        self._registry = registry
        self._dependency_type = dependency_type

    def to(self, resolving_type: Any, factory: Callable[[], T] | None = None) -> LifetimeSetter[T]:
        """Bind to ``resolving_type``, optionally built by a zero-argument ``factory``.

        Example:
          container.bind(Logger).to(ConsoleLogger).as_singleton()
          container.bind(Widget).to(WidgetImpl, lambda: WidgetImpl(size=3)).as_transient()

        """
        dependency_type = self._dependency_type
        context = {"dependency_type": dependency_type, "resolving_type": resolving_type}
        names = (errors.type_name(resolving_type), errors.type_name(dependency_type))

        if not is_assignable(resolving_type, dependency_type):
            msg = errors.INCOMPATIBLE_RESOLVING_TYPE.format(*names)
            raise errors.IncompatibleResolvingType(msg, **context)

        if factory is None and not is_concrete(resolving_type):
            msg = errors.RESOLVING_TYPE_NOT_CONCRETE.format(*names)
            raise errors.ResolvingTypeNotConcreteClass(msg, **context)

        return LifetimeSetter(self._registry, dependency_type, resolving_type, factory)


def register(registry: Registry, concrete_type: Any, factory: Callable[[], T] | None = None) -> LifetimeSetter[T]:
    """Shorthand for ``bind(concrete_type).to(concrete_type, factory)``.

    Interface-like types are accepted only together with a factory.
    """
    if not (is_concrete(concrete_type) or (factory is not None and is_interface(concrete_type))):
        msg = errors.REGISTERED_TYPE_NOT_CONCRETE.format(errors.type_name(concrete_type))
        raise errors.RegisteredTypeNotConcreteClass(
            msg,
            dependency_type=concrete_type,
            resolving_type=concrete_type,
        )
    return Binder(registry, concrete_type).to(concrete_type, factory)
