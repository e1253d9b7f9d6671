from __future__ import annotations

import inspect
import typing
from typing import Any, Generic, Protocol, cast, get_args, get_origin, get_type_hints


_NO_INSTANCE: Any = object()


def origin_class(tp: object) -> type | None:
    """Return the class behind a type token (``Repo`` for ``Repo[int]``), or None."""
    if inspect.isclass(tp):
        return tp
    origin = get_origin(tp)
    if inspect.isclass(origin) and origin not in (Generic, Protocol):
        return origin
    return None


def is_parameterized(tp: object) -> bool:
    return not inspect.isclass(tp) and origin_class(tp) is not None


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not Protocol


def is_runtime_checkable_protocol(tp: object) -> bool:
    if not is_protocol(tp):
        return False

    try:
        isinstance(None, cast("type", tp))
    except TypeError:
        return False
    else:
        return True


def is_interface(tp: object) -> bool:
    """Protocols and abstract base classes are the interface-like contracts."""
    cls = origin_class(tp)
    return cls is not None and (is_protocol(cls) or inspect.isabstract(cls))


def is_concrete(tp: object) -> bool:
    """A class that can be instantiated: not a protocol, no abstract members left."""
    cls = origin_class(tp)
    return cls is not None and not is_protocol(cls) and not inspect.isabstract(cls)


def is_valid_dependency_type(tp: object) -> bool:
    return is_interface(tp) or is_concrete(tp)


def _generic_bases(origin: type, args: tuple[Any, ...]) -> typing.Iterator[tuple[type, tuple[Any, ...]]]:
    """Walk the parameterized bases of ``origin[args]`` with type variables substituted."""
    yield origin, args
    substitutions = dict(zip(origin.__dict__.get("__parameters__", ()), args, strict=False))
    for base in origin.__dict__.get("__orig_bases__", origin.__bases__):
        base_origin = get_origin(base)
        if base_origin is None:
            if inspect.isclass(base):
                yield from _generic_bases(base, ())
            continue
        if base_origin in (Generic, Protocol) or not inspect.isclass(base_origin):
            continue
        base_args = tuple(substitutions.get(arg, arg) for arg in get_args(base))
        yield from _generic_bases(base_origin, base_args)


def _matches_parameterized(resolving: object, dependency: object) -> bool:
    res_origin = origin_class(resolving)
    if res_origin is None:
        return False
    res_args = get_args(resolving) if is_parameterized(resolving) else ()
    target = (origin_class(dependency), get_args(dependency))
    return any(candidate == target for candidate in _generic_bases(res_origin, res_args))


def is_assignable(resolving: object, dependency: object) -> bool:
    """Check that instances of ``resolving`` can stand in for ``dependency``.

    - For normal classes/ABCs: require issubclass(resolving, dependency).
    - For Protocols: nominal via MRO, otherwise best-effort structural conformance.
    - For parameterized generics: match origin and type arguments through the
      resolving type's generic bases.
    """
    res_cls = origin_class(resolving)
    dep_cls = origin_class(dependency)
    if res_cls is None or dep_cls is None:
        return False

    if is_parameterized(dependency):
        if _matches_parameterized(resolving, dependency):
            return True
        if not is_protocol(dep_cls):
            return False
        return not protocol_conformance_problems(dep_cls, res_cls)

    if not is_protocol(dep_cls):
        return issubclass(res_cls, dep_cls)

    if dep_cls in getattr(res_cls, "__mro__", ()):
        return True
    return not protocol_conformance_problems(dep_cls, res_cls)


def is_instance_of(instance: object, dependency: object) -> bool:
    """Check a built object (factory result or registered instance) against a dependency type."""
    if instance is None:
        return False
    dep_cls = origin_class(dependency)
    if dep_cls is None:
        return False
    if not is_protocol(dep_cls) or is_runtime_checkable_protocol(dep_cls):
        return isinstance(instance, dep_cls)
    impl = type(instance)
    if dep_cls in impl.__mro__:
        return True
    return not protocol_conformance_problems(dep_cls, impl, instance)


def protocol_conformance_problems(  # noqa: C901
    proto_cls: type, impl: type, instance: object = _NO_INSTANCE
) -> list[str]:
    """Best-effort structural conformance: presence + basic callable arity + return type checks.

    Annotated data members are checked only when a built ``instance`` is given,
    since attributes assigned in ``__init__`` do not exist on the class.
    Methods are always checked against ``impl``.
    """
    missing: list[str] = []
    signature_mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto_cls, include_extras=True)
    except (TypeError, NameError):
        proto_hints = {}

    # Attributes required by annotations
    for name in proto_hints:
        if name.startswith("_") or instance is _NO_INSTANCE:
            continue
        if inspect.isfunction(proto_cls.__dict__.get(name)):
            continue
        if not hasattr(instance, name):
            missing.append(name)

    for name, proto_attr in proto_cls.__dict__.items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        if not hasattr(impl, name):
            missing.append(name)
            continue

        impl_attr = getattr(impl, name)
        if not callable(impl_attr):
            signature_mismatches.append(f"{name}: not callable on {impl.__name__}")
            continue

        try:
            proto_sig = inspect.signature(proto_attr)
            impl_sig = inspect.signature(impl_attr)
        except (TypeError, ValueError) as e:
            signature_mismatches.append(f"{name}: unable to compare signatures ({e})")
            continue

        proto_params = [p for p in proto_sig.parameters.values() if p.name != "self"]
        impl_params = [p for p in impl_sig.parameters.values() if p.name != "self"]

        if _positional_arity(impl_params) < _positional_arity(proto_params):
            signature_mismatches.append(
                f"{name}: impl has fewer required positional params "
                f"({_positional_arity(impl_params)}) than protocol "
                f"({_positional_arity(proto_params)})"
            )

        proto_ret = proto_sig.return_annotation
        impl_ret = impl_sig.return_annotation
        if (
            proto_ret is not inspect.Signature.empty
            and impl_ret is not inspect.Signature.empty
            and proto_ret is not Any
            and impl_ret is not Any
            and not _is_return_type_compatible(impl_ret, proto_ret)
        ):
            signature_mismatches.append(
                f"{name}: return type {impl_ret!r} is not compatible with protocol return type {proto_ret!r}"
            )

    problems = []
    if missing:
        problems.append(f"missing members: {', '.join(missing)}")
    if signature_mismatches:
        problems.append(f"signature mismatches: {', '.join(signature_mismatches)}")
    return problems


def _positional_arity(params: list[inspect.Parameter]) -> int:
    return sum(
        1
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _is_return_type_compatible(impl_ret: object, proto_ret: object) -> bool:
    # Exact match
    if impl_ret == proto_ret:
        return True

    # Handle class-based covariance
    if isinstance(impl_ret, type) and isinstance(proto_ret, type):
        return issubclass(impl_ret, proto_ret)

    # Everything else (Union, Protocol, TypeVar, etc.) -> conservative failure
    return False
