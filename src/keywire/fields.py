"""Field annotations and the per-class field descriptors read by the injector.

Fields take part in injection by carrying a marker in their ``Annotated`` metadata:

    >>> @dataclass
    ... class Handler:
    ...     db: Annotated[Database, Service("db")] = None
    ...     cache: Annotated[Cache, Service("cache", optional=True)] = None
    ...     base: Annotated[Optional[BaseHandler], Embedded()] = None

:class:`Service` names the registry key resolved into the field; its ``optional``
argument declares whether a failed lookup is tolerated. :class:`Embedded` promotes
the fields of a nested object into the same injection pass. Fields declared on base
classes are part of the subclass's fields.
"""

import builtins
import inspect
import sys
import types
from dataclasses import dataclass
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    ClassVar,
    ForwardRef,
    Optional,
    Union,
    get_args,
    get_origin,
)

from keywire.errors import InvalidFieldError, InvalidTagError

__all__ = ["Service", "Embedded", "FieldSpec", "field_specs", "parse_optional", "UNION_TYPES"]

UNION_TYPES = (Union, types.UnionType)

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@dataclass(frozen=True)
class Service:
    """Marks a field to be populated from the registry.

    Attributes:
        key: The registry key to resolve. Strings and tagged keys also match keys
            sharing the same alias tag.
        optional: Whether a failed lookup leaves the field untouched instead of
            failing injection. Accepts a bool or a boolean string such as
            ``"true"`` or ``"0"``; ``None`` means the field is required.
    """

    key: Any
    optional: Any = None


@dataclass(frozen=True)
class Embedded:
    """Marks a field whose value's own fields are injected in the same pass."""

    pass


@dataclass(frozen=True)
class FieldSpec:
    """Describes one injectable field of a class.

    Attributes:
        name: The attribute name.
        declared_type: The field's type with the ``Annotated`` wrapper removed.
        service: The field's :class:`Service` marker, or ``None`` for embedded fields.
        embedded_class: The class allocated when an embedded field is unset, or ``None``
            for service fields.
    """

    name: str
    declared_type: Any
    service: Optional[Service]
    embedded_class: Optional[type]

    @property
    def embedded(self) -> bool:
        return self.embedded_class is not None


@lru_cache(maxsize=None)
def field_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Return the injectable fields of a class in declaration order.

    Fields declared on base classes come first. Each annotation is evaluated on its
    own, so unmarked fields naming types that only exist for type checkers are
    skipped. Results are cached per class.

    Raises:
        InvalidFieldError: If an embedded field is not annotated with a class, or a
            marked field's annotation cannot be evaluated.
    """
    specs: dict[str, Optional[FieldSpec]] = {}
    for klass in reversed(cls.__mro__):
        module = sys.modules.get(klass.__module__)
        globalns = getattr(module, "__dict__", {})
        localns = dict(vars(klass))
        for name, annotation in _raw_annotations(klass).items():
            hint = _resolve_annotation(name, annotation, globalns, localns)
            specs[name] = None if hint is None else _make_field_spec(name, hint)
    return tuple(spec for spec in specs.values() if spec is not None)


def _raw_annotations(klass: type) -> dict[str, Any]:
    """Return a class's own annotations without evaluating deferred ones."""
    if sys.version_info >= (3, 14):
        import annotationlib

        return annotationlib.get_annotations(klass, format=annotationlib.Format.FORWARDREF)
    return inspect.get_annotations(klass)


class _PartialNamespace(dict):
    """Local namespace that turns unknown names into forward references."""

    def __init__(self, localns: dict[str, Any], globalns: dict[str, Any]):
        super().__init__(localns)
        self._globalns = globalns

    def __missing__(self, key: str) -> Any:
        if key in self._globalns:
            return self._globalns[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        return ForwardRef(key)


def _resolve_annotation(
    name: str, annotation: Any, globalns: dict[str, Any], localns: dict[str, Any]
) -> Any:
    """Evaluate one field's annotation.

    Returns ``None`` for an unmarked annotation that cannot be evaluated, such as
    one naming a type imported only for type checkers.

    Raises:
        InvalidFieldError: If a ``Service`` or ``Embedded`` annotation cannot be evaluated.
    """
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)
    except Exception as e:
        error = e

    try:
        partial = eval(annotation, globalns, _PartialNamespace(localns, globalns))
    except Exception:
        return None
    if _marker(partial) is not None:
        raise InvalidFieldError(
            name, f"field '{name}' has an annotation that cannot be resolved: {error}"
        ) from error
    return None


def _marker(hint: Any) -> Optional[Union[Service, Embedded]]:
    if get_origin(hint) is not Annotated:
        return None
    return next((m for m in hint.__metadata__ if isinstance(m, (Service, Embedded))), None)


def _make_field_spec(name: str, hint: Any) -> Optional[FieldSpec]:
    marker = _marker(hint)
    if marker is None:
        return None

    declared_type = get_args(hint)[0]
    if get_origin(declared_type) is ClassVar:
        return None

    if isinstance(marker, Service):
        return FieldSpec(name, declared_type, marker, None)
    if isinstance(marker, Embedded):
        return FieldSpec(name, declared_type, None, _embedded_class(name, declared_type))
    return None


def _embedded_class(name: str, declared_type: Any) -> type:
    """Strip ``Optional`` from an embedded field's type and check it is a class."""
    candidate = declared_type
    if get_origin(candidate) in UNION_TYPES:
        members = [arg for arg in get_args(candidate) if arg is not type(None)]
        if len(members) == 1:
            candidate = members[0]

    if get_origin(candidate) is not None or not inspect.isclass(candidate):
        raise InvalidFieldError(
            name, f"embedded field '{name}' must be annotated with a class, not {declared_type}"
        )
    return candidate


def parse_optional(spec: FieldSpec) -> bool:
    """Interpret a service field's optionality annotation.

    Raises:
        InvalidTagError: If the annotation is neither a bool nor a boolean string.
    """
    value = spec.service.optional
    if value is None or value == "":
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
    raise InvalidTagError(spec.name, value)
