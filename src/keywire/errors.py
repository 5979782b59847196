"""Exceptions raised by registries and the injector."""

from typing import Any, Optional

__all__ = [
    "ServiceError",
    "NotFoundError",
    "DuplicateKeyError",
    "InvalidFieldError",
    "TypeMismatchError",
    "InvalidTagError",
    "HookError",
    "MisconfigurationError",
]


class ServiceError(Exception):
    """Base class for every error raised while registering or injecting services."""

    pass


class NotFoundError(ServiceError, KeyError):
    """Raised when no service is registered to a key anywhere in the registry chain."""

    def __init__(self, key: Any, message: str):
        super().__init__(message)
        self.key = key
        self.message = message

    def __str__(self) -> str:
        return self.message


class DuplicateKeyError(ServiceError):
    """Raised when a key, or a key with the same tag, is already registered."""

    def __init__(self, key: Any, message: str):
        super().__init__(message)
        self.key = key


class InvalidFieldError(ServiceError):
    """Raised when a resolved service cannot be written to the target field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class TypeMismatchError(ServiceError, TypeError):
    """Raised when a resolved service is not compatible with the field's declared type."""

    def __init__(self, field: str, type_name: str):
        super().__init__(f"field '{field}' cannot be assigned a value of type {type_name}")
        self.field = field
        self.type_name = type_name


class InvalidTagError(ServiceError):
    """Raised when a field's optionality annotation is not a boolean."""

    def __init__(self, field: str, value: Any = None):
        super().__init__(f"field '{field}' has an invalid optional tag")
        self.field = field
        self.value = value


class HookError(ServiceError):
    """Raised when a target's post-injection hook fails.

    The exception raised by the hook is available as ``__cause__``.
    """

    def __init__(self, target: Any, cause: Optional[BaseException] = None):
        super().__init__(f"post-injection hook of {type(target).__name__} failed: {cause}")
        self.target = target


class MisconfigurationError(RuntimeError):
    """Raised by the ``must_*`` helpers when a start-up registration or lookup fails.

    This is not a :class:`ServiceError`: it marks a programming defect rather than a
    condition callers are expected to handle.
    """

    pass
