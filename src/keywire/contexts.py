"""Ambient access to a registry for the current execution context.

This is a convenience for the edges of an application, such as request handlers
that need the registry without it being passed through every call. The injector
never consults it.

    >>> with with_registry(registry):
    ...     handle_request()
    >>>
    >>> def handle_request():
    ...     current_registry().inject(handler)
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

from keywire.registry import ServiceLookup

__all__ = ["current_registry", "use_registry", "reset_registry", "with_registry"]

_current_registry: ContextVar[Optional[ServiceLookup]] = ContextVar(
    "keywire_registry", default=None
)


def current_registry() -> Optional[ServiceLookup]:
    """Return the registry set for the current context, or ``None`` if there is none."""
    return _current_registry.get()


def use_registry(registry: ServiceLookup) -> Token:
    """Set the registry for the current context.

    Returns:
        A token for :func:`reset_registry`.
    """
    return _current_registry.set(registry)


def reset_registry(token: Token) -> None:
    _current_registry.reset(token)


@contextmanager
def with_registry(registry: ServiceLookup) -> Iterator[ServiceLookup]:
    """Set the registry for the duration of a ``with`` block."""
    token = use_registry(registry)
    try:
        yield registry
    finally:
        reset_registry(token)
