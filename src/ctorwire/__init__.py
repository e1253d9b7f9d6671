"""Constructor-injection dependency resolution engine.

This package builds fully wired object graphs from a registry of
"dependency type -> resolving type" bindings, honouring transient, singleton
and scoped lifetimes and resolving every constructor parameter recursively.

Exports:
- `Container`: bind types, resolve them, open scopes.
- `Lifetime`: transient / singleton / scoped (plus the uncommitted `UNDEFINED`).
- `Scope`: per-unit-of-work cache for scoped dependencies; a context manager.
- `Descriptor`: the committed record of one binding.
- `constructor`: marks a classmethod as an alternative constructor.
- `DependencyInjectionError` and its subclasses.
"""

from ._constructors import constructor
from ._container import Container
from ._descriptor import Binder, Descriptor, Lifetime, LifetimeSetter
from ._errors import (
    ConstructionFailure,
    DependencyInjectionError,
    IncompatibleResolvingType,
    InvalidDependencyType,
    InvalidLifetimeState,
    NoConstructorFound,
    OutsideScopeError,
    RegisteredTypeNotConcreteClass,
    ResolvingTypeNotConcreteClass,
    ScopeDisposedError,
    UnknownDependency,
    UnresolvableParameter,
)
from ._scope import Scope


__all__ = [
    "Binder",
    "ConstructionFailure",
    "Container",
    "DependencyInjectionError",
    "Descriptor",
    "IncompatibleResolvingType",
    "InvalidDependencyType",
    "InvalidLifetimeState",
    "Lifetime",
    "LifetimeSetter",
    "NoConstructorFound",
    "OutsideScopeError",
    "RegisteredTypeNotConcreteClass",
    "ResolvingTypeNotConcreteClass",
    "Scope",
    "ScopeDisposedError",
    "UnknownDependency",
    "UnresolvableParameter",
    "constructor",
]
