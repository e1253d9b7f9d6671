from __future__ import annotations

import logging
import threading
import uuid
from typing import TYPE_CHECKING, Any, TypeVar, overload

from . import _errors as errors


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from types import TracebackType

    from ._resolver import Resolver

T = TypeVar("T")


class Scope:
    """A bounded unit of sharing for scoped dependencies.

    Scoped dependencies resolved through the same scope are built once and
    cached here; singleton and transient dependencies behave as they do on the
    container. Scopes are independent of each other, even when nested.

    Use as a context manager so the scope is disposed on every exit path::

        with container.create_scope() as scope:
            repo = scope.resolve(Repo)
    """

    def __init__(self, manager: ScopeManager, resolver: Resolver) -> None:
        self._id = uuid.uuid4()
        self._manager = manager
        self._resolver = resolver
        self._instances: dict[Any, Any] = {}
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @overload
    def resolve(self, dependency_type: type[T]) -> T: ...

    @overload
    def resolve(self, dependency_type: Any) -> Any: ...

    def resolve(self, dependency_type: Any) -> Any:
        """Resolve a dependency with this scope active."""
        if self._disposed:
            msg = errors.SCOPE_DISPOSED.format(self._id, errors.type_name(dependency_type))
            raise errors.ScopeDisposedError(msg, dependency_type=dependency_type)
        return self._resolver.resolve(dependency_type, self)

    def get_cached(self, dependency_type: Any, default: Any = None) -> Any:
        with self._lock:
            return self._instances.get(dependency_type, default)

    def cache(self, dependency_type: Any, instance: T) -> T:
        """Store ``instance`` unless another thread got there first; return the stored value."""
        with self._lock:
            if self._disposed:
                return instance
            return self._instances.setdefault(dependency_type, instance)

    def dispose(self) -> None:
        """Clear cached instances and unregister from the container. Idempotent."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._instances.clear()

        self._manager.remove(self)
        logger.debug("Disposed scope %s", self._id)

    def __enter__(self) -> Scope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"<Scope {self._id} {state}>"


class ScopeManager:
    """Tracks the open scopes of one container by id."""

    def __init__(self, lock: threading.RLock) -> None:
        self._scopes: dict[uuid.UUID, Scope] = {}
        self._lock = lock

    def create(self, resolver: Resolver) -> Scope:
        scope = Scope(self, resolver)
        with self._lock:
            self._scopes[scope.id] = scope
        logger.debug("Created scope %s", scope.id)
        return scope

    def remove(self, scope: Scope) -> None:
        with self._lock:
            self._scopes.pop(scope.id, None)

    def get(self, scope_id: uuid.UUID) -> Scope | None:
        with self._lock:
            return self._scopes.get(scope_id)

    def ids(self) -> frozenset[uuid.UUID]:
        with self._lock:
            return frozenset(self._scopes)
