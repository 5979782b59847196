"""Helpers for describing registry keys and deriving their alias tags.

Any hashable value can be used as a registry key. String keys double as their own
tag, so they can be named directly in a :class:`keywire.fields.Service` marker.
Other keys may opt in to the same behaviour by implementing :class:`TaggedKey`::

    >>> @dataclass(frozen=True)
    ... class LoggerKey:
    ...     def tag(self) -> str:
    ...         return "logger"
    >>>
    >>> registry.set(LoggerKey(), logger)
    >>> registry.get("logger") is logger
    True
"""

from typing import Any, Optional, Protocol, runtime_checkable

__all__ = ["TaggedKey", "tag_for_key", "pretty_key", "type_name"]


@runtime_checkable
class TaggedKey(Protocol):
    """Optional protocol for non-string keys that should also resolve by name.

    Two distinct keys returning the same tag are treated as the same key within a
    single registry.
    """

    def tag(self) -> str:
        ...


def tag_for_key(key: Any) -> Optional[str]:
    """Return the alias tag of a key, or ``None`` if it has none.

    Example:
        >>> tag_for_key("db")           # Returns "db"
        >>> tag_for_key(LoggerKey())    # Returns "logger"
        >>> tag_for_key(42)             # Returns None
    """
    if isinstance(key, str):
        return key
    # runtime_checkable only tests for the attribute, so a plain ``tag`` field must not match
    if not isinstance(key, type) and isinstance(key, TaggedKey) and callable(key.tag):
        return key.tag()
    return None


def pretty_key(key: Any) -> str:
    """Return a human-readable description of a key for error messages.

    Example:
        >>> pretty_key("db")            # Returns '"db"'
        >>> pretty_key(LoggerKey())     # Returns 'LoggerKey ("logger")'
        >>> pretty_key(42)              # Returns 'int'
    """
    if isinstance(key, str):
        return f'"{key}"'

    tag = tag_for_key(key)
    if tag is not None:
        return f'{type(key).__name__} ("{tag}")'
    return type(key).__name__


def type_name(value: Any) -> str:
    """Return the qualified type name of a value, or ``"None"`` for ``None``."""
    if value is None:
        return "None"

    value_type = type(value)
    if value_type.__module__ == "builtins":
        return value_type.__qualname__
    return f"{value_type.__module__}.{value_type.__qualname__}"
