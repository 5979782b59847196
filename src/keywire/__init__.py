"""Keywire service registry and tag-driven dependency injection.

Keywire keeps services in a :class:`~keywire.registry.Registry` under arbitrary keys
and populates objects by reading annotations on their fields. There is no
composition root and no dependency graph: each annotated field is resolved lazily
against the registry when :func:`~keywire.injector.inject` is called.

Key Features:
    - Registration under any hashable key, with string alias tags
    - Duplicate registrations rejected rather than overwritten
    - Layered registries and read-only overlays for request or task scopes
    - Field injection driven by ``typing.Annotated`` markers
    - Embedded objects injected in the same pass
    - Optional post-injection hooks

Basic Usage:
    >>> from typing import Annotated
    >>> from keywire.fields import Service
    >>> from keywire.registry import Registry
    >>>
    >>> registry = Registry()
    >>> registry.set("db", Database())
    >>>
    >>> class Handler:
    ...     db: Annotated[Database, Service("db")] = None
    >>>
    >>> handler = Handler()
    >>> registry.inject(handler)

The package consists of several modules:
    - registry: Layered service storage
    - overlay: Read-only shadowing of a registry
    - fields: Field markers and per-class field descriptors
    - injector: The injection algorithm
    - hooks: Post-injection hooks
    - keys: Alias tags and key descriptions
    - locks: Read/write lock guarding each registry
    - contexts: Ambient registry for the current context
    - errors: Framework-specific exceptions
"""
