from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._errors import type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import threading

    from ._descriptor import Descriptor


class Registry:
    """Dependency type -> descriptor map guarded by the container-wide lock.

    Binding the same dependency type again replaces the previous descriptor.
    """

    def __init__(self, lock: threading.RLock) -> None:
        self._descriptors: dict[Any, Descriptor[Any]] = {}
        self.lock = lock

    def add(self, descriptor: Descriptor[Any]) -> None:
        with self.lock:
            previous = self._descriptors.get(descriptor.dependency_type)
            self._descriptors[descriptor.dependency_type] = descriptor

        if previous is not None:
            logger.debug(
                "Replaced binding for %s (%s, %s)",
                type_name(descriptor.dependency_type),
                type_name(previous.resolving_type),
                previous.lifetime.value,
            )
        logger.debug(
            "Bound %s to %s as %s",
            type_name(descriptor.dependency_type),
            type_name(descriptor.resolving_type),
            descriptor.lifetime.value,
        )

    def get(self, dependency_type: Any) -> Descriptor[Any] | None:
        with self.lock:
            return self._descriptors.get(dependency_type)

    def __contains__(self, dependency_type: object) -> bool:
        with self.lock:
            return dependency_type in self._descriptors
