from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from ._descriptor import Lifetime


def type_name(tp: object) -> str:
    """Qualified, human readable name for a type token used in error messages."""
    if tp is None:
        return "None"
    module = getattr(tp, "__module__", None)
    qualname = getattr(tp, "__qualname__", None)
    if isinstance(tp, type) and qualname:
        if module in (None, "builtins"):
            return qualname
        return f"{module}.{qualname}"
    return repr(tp)


class DependencyInjectionError(RuntimeError):
    """Base class for every error raised by the container.

    Carries the binding context that failed so callers can diagnose the
    problem without poking at container internals.
    """

    def __init__(
        self,
        message: str,
        *,
        dependency_type: Any = None,
        resolving_type: Any = None,
        lifetime: Lifetime | None = None,
    ) -> None:
        super().__init__(message)
        self.dependency_type = dependency_type
        self.resolving_type = resolving_type
        self.lifetime = lifetime


class InvalidDependencyType(DependencyInjectionError):
    """Bind target is neither interface-like nor a concrete class."""


class IncompatibleResolvingType(DependencyInjectionError):
    """Resolving type (or factory result) is not assignable to the dependency type."""


class ResolvingTypeNotConcreteClass(DependencyInjectionError):
    """Resolving type can't be instantiated and no factory was supplied."""


class RegisteredTypeNotConcreteClass(DependencyInjectionError):
    """Registered type can't be instantiated and no factory was supplied."""


class UnknownDependency(DependencyInjectionError):
    """Resolve requested for a type that was never bound."""


class OutsideScopeError(DependencyInjectionError):
    """Scoped dependency resolved without an active scope."""


class NoConstructorFound(DependencyInjectionError):
    """Resolving type exposes no constructor that can be introspected."""


class ConstructionFailure(DependencyInjectionError):
    """A factory or constructor raised while building an instance.

    The original exception is available as ``__cause__`` and ``inner``.
    """

    def __init__(self, message: str, *, inner: BaseException, **context: Any) -> None:
        super().__init__(message, **context)
        self.inner = inner


class InvalidLifetimeState(DependencyInjectionError):
    """A descriptor reached resolution without a lifetime."""


class UnresolvableParameter(DependencyInjectionError):
    """Constructor parameter has neither a type annotation nor a default."""

    def __init__(self, message: str, *, parameter: str, **context: Any) -> None:
        super().__init__(message, **context)
        self.parameter = parameter


class ScopeDisposedError(DependencyInjectionError):
    """Resolve attempted through a scope that has already been disposed."""


# Message templates.
UNABLE_TO_RESOLVE = "Unable to resolve dependency {0}."
CANNOT_BE_BOUND = "Resolving type {0} can't be bound to dependency type {1}."

DEPENDENCY_TYPE_NOT_VALID = "Dependency type {0} must be an interface or a concrete class type."
FAILED_TO_CONSTRUCT = (
    "An exception was thrown while trying to construct the resolving object for dependency type {0}.\nReason: {1}"
)
INCOMPATIBLE_RESOLVING_TYPE = CANNOT_BE_BOUND + " Resolving type is not assignable to dependency type."
INCOMPATIBLE_FACTORY_RESULT = (
    UNABLE_TO_RESOLVE + " The factory returned {1}, which is not assignable to the dependency type."
)
INCOMPATIBLE_INSTANCE = "Instance of type {0} can't be registered for dependency type {1}."
INVALID_LIFETIME = "Can't retrieve the resolving object for dependency {0} having an invalid lifetime."
NO_CONSTRUCTORS_FOUND = "No constructors could be found for resolving type {0}."
REGISTERED_TYPE_NOT_CONCRETE = "The registered type {0} must be a concrete class type."
RESOLVING_TYPE_NOT_CONCRETE = CANNOT_BE_BOUND + " Resolving type must be a concrete class type."
SCOPE_DISPOSED = "Scope {0} has been disposed. Cannot resolve dependency {1} from a disposed scope."
SCOPED_OUTSIDE_OF_SCOPE = "Invalid attempt to resolve scoped dependency {0} outside of a scope."
UNKNOWN_DEPENDENCY = UNABLE_TO_RESOLVE + " The dependency was never registered with the container."
UNRESOLVABLE_PARAMETER = (
    "Cannot satisfy constructor parameter '{0}' of {1}. "
    "The parameter has no type annotation and no default value."
)
