"""Layered, thread-safe storage of services indexed by key.

A :class:`Registry` maps arbitrary hashable keys to service values. Lookups fall back
to the key's alias tag (see :mod:`keywire.keys`) and then to the parent registry, so
registries can be layered to model global, request, or other application scopes::

    >>> app = Registry()
    >>> app.set("db", Database())
    >>> request = app.with_values({"logger": request_logger})
    >>> request.get("db")        # Found in parent
    >>> request.get("logger")    # Found locally

Writes are never local to a layer: calling :meth:`Registry.set` on a child modifies
the root registry, so every layer created from it sees the new service.
"""

from typing import Any, Mapping, Optional, Protocol

import structlog

from keywire.errors import (
    DuplicateKeyError,
    MisconfigurationError,
    NotFoundError,
    ServiceError,
)
from keywire.keys import pretty_key, tag_for_key
from keywire.locks import ReadWriteLock

__all__ = ["ServiceLookup", "Registry"]

logger = structlog.get_logger(__name__)


class ServiceLookup(Protocol):
    """Read capability the injector needs from a registry."""

    def get(self, key: Any) -> Any:
        ...


class Registry:
    """Collection of services retrievable by a unique key.

    Within one registry no two services may share a key or a derived alias tag.
    Registration conflicts raise :class:`DuplicateKeyError` rather than overwrite.

    Attributes:
        parent: The registry reads fall back to, or ``None`` for a root registry.
    """

    def __init__(self):
        self._services: dict[Any, Any] = {}
        self._keys_by_tag: dict[str, Any] = {}
        self._lock = ReadWriteLock()
        self.parent: Optional["Registry"] = None

    def get(self, key: Any) -> Any:
        """Retrieve the service registered to the given key.

        Args:
            key: The key, or any key sharing its alias tag.

        Returns:
            The registered service.

        Raises:
            NotFoundError: If no service is registered to the key in this registry or
                any of its ancestors.
        """
        with self._lock.read():
            if key in self._services:
                return self._services[key]

            tag = tag_for_key(key)
            if tag is not None and tag in self._keys_by_tag:
                return self._services[self._keys_by_tag[tag]]

        if self.parent is not None:
            return self.parent.get(key)

        raise NotFoundError(key, f"no service registered to key {pretty_key(key)}")

    def set(self, key: Any, service: Any) -> None:
        """Register a service with the given key.

        On a layered registry the service is stored in the root registry.

        Raises:
            DuplicateKeyError: If a service is already registered to the key, or to a
                key with the same alias tag.
        """
        with self._lock.write():
            tag = tag_for_key(key)
            if key in self._services or (tag is not None and tag in self._keys_by_tag):
                raise DuplicateKeyError(key, f"duplicate service key {pretty_key(key)}")

            if self.parent is not None:
                self.parent.set(key, service)
                return

            self._services[key] = service
            if tag is not None:
                self._keys_by_tag[tag] = key

        logger.debug("service registered", key=pretty_key(key))

    def must_get(self, key: Any) -> Any:
        """Call :meth:`get`, treating failure as a programming error."""
        try:
            return self.get(key)
        except ServiceError as e:
            logger.critical("required service lookup failed", key=pretty_key(key), error=str(e))
            raise MisconfigurationError(str(e)) from e

    def must_set(self, key: Any, service: Any) -> None:
        """Call :meth:`set`, treating failure as a programming error.

        Intended for static registrations made at start-up.
        """
        try:
            self.set(key, service)
        except ServiceError as e:
            logger.critical("service registration failed", key=pretty_key(key), error=str(e))
            raise MisconfigurationError(str(e)) from e

    def with_values(self, services: Mapping[Any, Any]) -> "Registry":
        """Return a child registry with the given services layered on top of this one.

        The child resolves the given services first and falls back to this registry.
        Calling :meth:`set` on the child modifies this registry's root.

        Args:
            services: Mapping of keys to services visible only through the child.

        Returns:
            The child :class:`Registry`.

        Raises:
            DuplicateKeyError: If two keys in ``services`` share an alias tag.
        """
        child = Registry()
        for key, service in services.items():
            child.set(key, service)

        child.parent = self
        logger.debug("layered registry created", keys=[pretty_key(k) for k in services])
        return child

    def inject(self, target: Any) -> None:
        """Populate the annotated fields of ``target`` from this registry.

        See :func:`keywire.injector.inject`.
        """
        from keywire.injector import inject

        inject(self, target)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __contains__(self, key: Any) -> bool:
        try:
            self.get(key)
        except NotFoundError:
            return False
        return True
