from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import _errors as errors
from ._descriptor import Lifetime
from ._types import is_instance_of


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._constructors import ConstructorCatalog, ConstructorInfo, ParameterInfo
    from ._descriptor import Descriptor
    from ._registry import Registry
    from ._scope import Scope

_MISSING: Any = object()


class Resolver:
    """Recursive constructor-injection engine.

    Locks guard only the check and commit of a single cache slot; nested
    dependencies are always resolved with no lock held by this resolver.
    Cyclic bindings are not detected and end in ``RecursionError``.
    """

    def __init__(self, registry: Registry, catalog: ConstructorCatalog) -> None:
        self._registry = registry
        self._catalog = catalog

    def resolve(self, dependency_type: Any, scope: Scope | None = None) -> Any:
        descriptor = self._registry.get(dependency_type)
        if descriptor is None:
            msg = errors.UNKNOWN_DEPENDENCY.format(errors.type_name(dependency_type))
            raise errors.UnknownDependency(msg, dependency_type=dependency_type)

        lifetime = descriptor.lifetime
        if lifetime is Lifetime.SINGLETON:
            return self._resolve_singleton(descriptor, scope)
        if lifetime is Lifetime.TRANSIENT:
            return self._construct(descriptor, scope)
        if lifetime is Lifetime.SCOPED:
            return self._resolve_scoped(descriptor, scope)

        msg = errors.INVALID_LIFETIME.format(errors.type_name(dependency_type))
        raise errors.InvalidLifetimeState(msg, **_context(descriptor))

    def _resolve_singleton(self, descriptor: Descriptor[Any], scope: Scope | None) -> Any:
        with self._registry.lock:
            if descriptor.has_singleton_instance:
                return descriptor.singleton_instance

        # Arguments are resolved outside the lock; only the build and store are exclusive.
        ctor, arguments = self._prepare(descriptor, scope)
        with self._registry.lock:
            if descriptor.has_singleton_instance:
                return descriptor.singleton_instance
            instance = descriptor.store_singleton(self._build(descriptor, ctor, arguments))

        logger.debug("Constructed singleton %s", errors.type_name(descriptor.dependency_type))
        return instance

    def _resolve_scoped(self, descriptor: Descriptor[Any], scope: Scope | None) -> Any:
        if scope is None:
            msg = errors.SCOPED_OUTSIDE_OF_SCOPE.format(errors.type_name(descriptor.dependency_type))
            raise errors.OutsideScopeError(msg, **_context(descriptor))

        cached = scope.get_cached(descriptor.dependency_type, _MISSING)
        if cached is not _MISSING:
            return cached

        return scope.cache(descriptor.dependency_type, self._construct(descriptor, scope))

    def _construct(self, descriptor: Descriptor[Any], scope: Scope | None) -> Any:
        ctor, arguments = self._prepare(descriptor, scope)
        return self._build(descriptor, ctor, arguments)

    def _prepare(
        self, descriptor: Descriptor[Any], scope: Scope | None
    ) -> tuple[ConstructorInfo | None, dict[str, Any]]:
        """Select the constructor and resolve its arguments; factories need neither."""
        if descriptor.factory is not None:
            return None, {}

        ctor = self._catalog.select(descriptor.resolving_type)
        arguments = {p.name: self._resolve_parameter(descriptor, p, scope) for p in ctor.parameters}
        return ctor, arguments

    def _resolve_parameter(self, descriptor: Descriptor[Any], p: ParameterInfo, scope: Scope | None) -> Any:
        """Resolving param.

        Resolution precedence:
        1. registered annotation type (same scope is propagated)
        2. default
        3. annotation type, failing with UnknownDependency
        4. error.
        """
        if p.has_annotation and p.annotation in self._registry:
            return self.resolve(p.annotation, scope)

        if p.has_default:
            return p.default

        if p.has_annotation:
            return self.resolve(p.annotation, scope)

        msg = errors.UNRESOLVABLE_PARAMETER.format(p.name, errors.type_name(descriptor.resolving_type))
        raise errors.UnresolvableParameter(msg, parameter=p.name, **_context(descriptor))

    def _build(self, descriptor: Descriptor[Any], ctor: ConstructorInfo | None, arguments: dict[str, Any]) -> Any:
        try:
            if ctor is None:
                instance = descriptor.factory()  # type: ignore[misc]
            else:
                instance = ctor.invoke(arguments)
        except Exception as exc:
            msg = errors.FAILED_TO_CONSTRUCT.format(errors.type_name(descriptor.dependency_type), exc)
            raise errors.ConstructionFailure(msg, inner=exc, **_context(descriptor)) from exc

        if ctor is None and not is_instance_of(instance, descriptor.dependency_type):
            msg = errors.INCOMPATIBLE_FACTORY_RESULT.format(
                errors.type_name(descriptor.dependency_type), errors.type_name(type(instance))
            )
            raise errors.IncompatibleResolvingType(msg, **_context(descriptor))

        return instance


def _context(descriptor: Descriptor[Any]) -> dict[str, Any]:
    return {
        "dependency_type": descriptor.dependency_type,
        "resolving_type": descriptor.resolving_type,
        "lifetime": descriptor.lifetime,
    }
