"""Read-only shadowing of a registry for short-lived code paths.

An :class:`Overlay` lets a caller re-assign services for a specialised code path
without touching the wrapped registry. It can be used, for example, to inject a
logger carrying the context of the current request or task into a short-lived
handler::

    >>> overlay = Overlay(registry, {"logger": request_logger})
    >>> overlay.inject(handler)

Unlike :meth:`keywire.registry.Registry.with_values`, the overlay's services are
fixed at construction and never take part in duplicate-key checks.
"""

from types import MappingProxyType
from typing import Any, Mapping

import structlog

from keywire.errors import MisconfigurationError, ServiceError
from keywire.injector import inject
from keywire.keys import pretty_key
from keywire.registry import Registry

__all__ = ["Overlay"]

logger = structlog.get_logger(__name__)


class Overlay:
    """Wraps a registry with an immutable map of services consulted first.

    Args:
        base: The registry to fall back to and to write through to.
        services: Services that shadow the base registry. The mapping is copied, so
            later changes to it are not visible through the overlay.
    """

    def __init__(self, base: Registry, services: Mapping[Any, Any]):
        self.base = base
        self._services = MappingProxyType(dict(services))
        logger.debug("overlay created", keys=[pretty_key(k) for k in self._services])

    def get(self, key: Any) -> Any:
        """Retrieve a service from the overlay, falling back to the base registry.

        Raises:
            NotFoundError: If neither the overlay nor the base registry has the key.
        """
        if key in self._services:
            return self._services[key]
        return self.base.get(key)

    def set(self, key: Any, service: Any) -> None:
        """Register a service directly in the base registry."""
        self.base.set(key, service)

    def must_get(self, key: Any) -> Any:
        try:
            return self.get(key)
        except ServiceError as e:
            logger.critical("required service lookup failed", key=pretty_key(key), error=str(e))
            raise MisconfigurationError(str(e)) from e

    def must_set(self, key: Any, service: Any) -> None:
        self.base.must_set(key, service)

    def inject(self, target: Any) -> None:
        """Populate ``target`` favouring services from the overlay."""
        inject(self, target)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __contains__(self, key: Any) -> bool:
        return key in self._services or key in self.base
