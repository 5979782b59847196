"""Populate the annotated fields of an object from a registry.

:func:`inject` walks the fields of a target object (see :mod:`keywire.fields`) in
declaration order. Each :class:`~keywire.fields.Service` field is resolved against
the registry and assigned; each :class:`~keywire.fields.Embedded` field is injected
recursively as part of the same pass. Once an object's fields are populated its
post-injection hook, if any, is invoked.

Injection is fail-fast: the first required field that cannot be resolved, coerced
or assigned aborts the call, and fields already written stay written.
"""

import collections.abc
import dataclasses
import inspect
import numbers
from typing import Annotated, Any, Literal, TypeVar, get_args, get_origin

from keywire.errors import InvalidFieldError, ServiceError, TypeMismatchError
from keywire.fields import UNION_TYPES, FieldSpec, field_specs, parse_optional
from keywire.hooks import run_post_inject
from keywire.keys import type_name
from keywire.registry import ServiceLookup

__all__ = ["inject"]

FieldPath = tuple[str, ...]

_MISSING = object()


def inject(registry: ServiceLookup, target: Any) -> None:
    """Populate the annotated fields of ``target`` from ``registry``.

    Targets that are not plain objects (classes, functions, modules, or instances of
    builtin types) are left alone.

    Args:
        registry: Anything with a ``get(key)`` method, such as a
            :class:`~keywire.registry.Registry` or :class:`~keywire.overlay.Overlay`.
        target: The object to populate.

    Raises:
        NotFoundError: If a required service is not registered.
        InvalidTagError: If a field's optionality annotation is not a boolean.
        InvalidFieldError: If a resolved service cannot be written to its field.
        TypeMismatchError: If a resolved service does not match its field's type.
        HookError: If a post-injection hook fails.
    """
    _inject(registry, target, target, ())


def _inject(registry: ServiceLookup, obj: Any, root: Any, path: FieldPath) -> bool:
    """Inject the fields of ``obj``, found at ``path`` below ``root``.

    Writes are made through ``root`` so the caller's object graph is updated in place.
    Returns True if ``obj`` or any embedded value has annotated fields.
    """
    if not _is_struct(obj):
        return False

    has_annotated_fields = False
    for spec in field_specs(type(obj)):
        field_path = path + (spec.name,)
        if spec.embedded:
            if _inject_embedded_field(registry, spec, root, field_path):
                has_annotated_fields = True
        else:
            has_annotated_fields = True
            _load_service_field(registry, spec, root, field_path)

    run_post_inject(obj)
    return has_annotated_fields


def _inject_embedded_field(
    registry: ServiceLookup, spec: FieldSpec, root: Any, field_path: FieldPath
) -> bool:
    """Inject an embedded field, allocating it first if it is unset.

    An allocated value with no annotated fields is rolled back to None, or removed
    again if the attribute did not exist before.
    """
    owner = _owner(root, field_path)
    if not _is_settable(owner, spec.name):
        return False

    value = getattr(owner, spec.name, _MISSING)
    existed = value is not _MISSING
    allocated = False
    if value is None or not existed:
        try:
            value = spec.embedded_class()
        except TypeError as e:
            raise InvalidFieldError(
                spec.name, f"field '{spec.name}' could not be allocated: {e}"
            ) from e
        try:
            setattr(owner, spec.name, value)
        except AttributeError:
            return False
        allocated = True

    has_annotated_fields = _inject(registry, value, root, field_path)
    if not has_annotated_fields and allocated:
        if existed:
            setattr(_owner(root, field_path), spec.name, None)
        else:
            delattr(_owner(root, field_path), spec.name)

    return has_annotated_fields


def _load_service_field(
    registry: ServiceLookup, spec: FieldSpec, root: Any, field_path: FieldPath
) -> None:
    optional = parse_optional(spec)

    try:
        service = registry.get(spec.service.key)
    except ServiceError:
        if optional:
            return
        raise

    owner = _owner(root, field_path)
    if not _is_settable(owner, spec.name):
        raise InvalidFieldError(
            spec.name, f"field '{spec.name}' can not be set - it may be private or read-only"
        )

    try:
        value = _coerce(service, spec.declared_type)
    except _Mismatch:
        raise TypeMismatchError(spec.name, type_name(service)) from None

    try:
        setattr(owner, spec.name, value)
    except AttributeError as e:
        raise InvalidFieldError(
            spec.name, f"field '{spec.name}' can not be set - it may be private or read-only"
        ) from e


def _owner(root: Any, field_path: FieldPath) -> Any:
    """Return the object holding the last field of ``field_path``."""
    owner = root
    for name in field_path[:-1]:
        owner = getattr(owner, name)
    return owner


def _is_struct(obj: Any) -> bool:
    return not (
        obj is None
        or inspect.isclass(obj)
        or inspect.isroutine(obj)
        or inspect.ismodule(obj)
        or type(obj).__module__ == "builtins"
    )


def _is_settable(owner: Any, name: str) -> bool:
    if name.startswith("_"):
        return False
    if dataclasses.is_dataclass(owner) and owner.__dataclass_params__.frozen:
        return False
    return True


class _Mismatch(Exception):
    pass


def _coerce(value: Any, declared_type: Any) -> Any:
    """Return ``value`` converted to ``declared_type``.

    ``None`` never matches. Numbers convert between ``int``, ``float`` and
    ``complex`` where no information is lost.

    Raises:
        _Mismatch: If the value is not compatible with the type.
    """
    if value is None:
        raise _Mismatch()
    if declared_type is Any or declared_type is object:
        return value

    origin = get_origin(declared_type)
    if origin is Annotated:
        return _coerce(value, get_args(declared_type)[0])
    if origin in UNION_TYPES:
        for member in get_args(declared_type):
            if member is type(None):
                continue
            try:
                return _coerce(value, member)
            except _Mismatch:
                continue
        raise _Mismatch()
    if origin is Literal:
        if value in get_args(declared_type):
            return value
        raise _Mismatch()
    if origin is collections.abc.Callable:
        if callable(value):
            return value
        raise _Mismatch()
    if origin is not None:
        declared_type = origin

    if isinstance(declared_type, TypeVar):
        if declared_type.__bound__ is None:
            return value
        return _coerce(value, declared_type.__bound__)
    if hasattr(declared_type, "__supertype__"):
        return _coerce(value, declared_type.__supertype__)
    if not isinstance(declared_type, type):
        return value

    try:
        if isinstance(value, declared_type):
            return value
    except TypeError:
        # Protocols without runtime_checkable cannot be checked
        return value

    return _convert_number(value, declared_type)


def _convert_number(value: Any, declared_type: type) -> Any:
    if isinstance(value, bool):
        raise _Mismatch()
    if declared_type is int and isinstance(value, numbers.Integral):
        return int(value)
    if declared_type is float and isinstance(value, numbers.Real):
        return float(value)
    if declared_type is complex and isinstance(value, numbers.Complex):
        return complex(value)
    raise _Mismatch()
