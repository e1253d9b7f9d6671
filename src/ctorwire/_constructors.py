from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints

from . import _errors as errors
from ._types import origin_class


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

T = TypeVar("T")

_CONSTRUCTOR_MARK = "__ctorwire_constructor__"
_INJECTABLE_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def constructor(func: T) -> T:
    """Mark a classmethod as an alternative constructor the container may pick.

    Works above or below ``@classmethod``::

        class Mailer:
            def __init__(self) -> None: ...

            @constructor
            @classmethod
            def with_transport(cls, transport: Transport) -> Mailer: ...
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, _CONSTRUCTOR_MARK, True)
    return func


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    kind: inspect._ParameterKind
    annotation: Any = inspect.Parameter.empty
    default: Any = inspect.Parameter.empty

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True)
class ConstructorInfo:
    """One way of building a resolving type, with its injectable parameters in order."""

    name: str
    func: Callable[..., Any]
    parameters: tuple[ParameterInfo, ...]

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    def invoke(self, arguments: Mapping[str, Any]) -> Any:
        args, kwargs = [], {}
        for p in self.parameters:
            if p.name not in arguments:
                continue
            if p.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(arguments[p.name])
            else:
                kwargs[p.name] = arguments[p.name]
        return self.func(*args, **kwargs)


class ConstructorCatalog:
    """Type-token keyed cache of constructor metadata.

    Constructors of a type are its ``__init__`` followed by every
    ``@constructor`` classmethod, most-derived class first, in definition order.
    """

    def __init__(self) -> None:
        self._constructors: dict[Any, tuple[ConstructorInfo, ...]] = {}
        self._lock = threading.Lock()

    def constructors(self, resolving_type: Any) -> tuple[ConstructorInfo, ...]:
        with self._lock:
            cached = self._constructors.get(resolving_type)
        if cached is not None:
            return cached

        found = tuple(_enumerate_constructors(resolving_type))
        with self._lock:
            return self._constructors.setdefault(resolving_type, found)

    def select(self, resolving_type: Any) -> ConstructorInfo:
        """Pick the constructor with the most parameters; on ties the first enumerated wins."""
        candidates = self.constructors(resolving_type)
        if not candidates:
            msg = errors.NO_CONSTRUCTORS_FOUND.format(errors.type_name(resolving_type))
            raise errors.NoConstructorFound(msg, resolving_type=resolving_type)

        chosen = candidates[0]
        for candidate in candidates[1:]:
            if candidate.parameter_count > chosen.parameter_count:
                chosen = candidate
        return chosen


def _enumerate_constructors(resolving_type: Any) -> list[ConstructorInfo]:
    cls = origin_class(resolving_type)
    if cls is None:
        return []

    found = []
    init = _init_constructor(resolving_type, cls)
    if init is not None:
        found.append(init)

    seen: set[str] = set()
    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if not isinstance(attr, classmethod) or not getattr(attr.__func__, _CONSTRUCTOR_MARK, False):
                continue
            method = getattr(cls, name)
            found.append(
                ConstructorInfo(
                    name=name,
                    func=method,
                    parameters=_parameters(inspect.signature(method), _get_type_hints(attr.__func__, cls)),
                )
            )
    return found


def _init_constructor(resolving_type: Any, cls: type) -> ConstructorInfo | None:
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return ConstructorInfo(name="__init__", func=resolving_type, parameters=())

    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        logger.debug("No introspectable __init__ on %s", errors.type_name(cls))
        return None

    try:
        init = inspect.getattr_static(cls, "__init__")
    except AttributeError:
        init = None
    hints = _get_type_hints(init, cls) if inspect.isfunction(init) else {}
    return ConstructorInfo(name="__init__", func=resolving_type, parameters=_parameters(sig, hints))


def _parameters(sig: inspect.Signature, hints: dict[str, Any]) -> tuple[ParameterInfo, ...]:
    return tuple(
        ParameterInfo(
            name=name,
            kind=p.kind,
            annotation=hints.get(name, p.annotation),
            default=p.default,
        )
        for name, p in sig.parameters.items()
        if p.kind in _INJECTABLE_KINDS
    )


def _get_type_hints(func: Callable[..., Any], cls: type) -> dict[str, Any]:
    try:
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {
            name: ann for name, ann in getattr(func, "__annotations__", {}).items() if not isinstance(ann, str)
        }

    hints.pop("return", None)
    return hints
