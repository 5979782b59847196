from dataclasses import dataclass
from typing import Annotated, ClassVar, Optional, Union

import pytest

from keywire.errors import InvalidFieldError, InvalidTagError
from keywire.fields import Embedded, FieldSpec, Service, field_specs, parse_optional
from tests.deferred_fixtures import PricedProcess
from tests.fixtures import EmbeddedProcess, InheritedProcess, IntWrapper, SimpleProcess


@dataclass
class Mixed:
    plain: int = 0
    counter: ClassVar[Annotated[int, Service("counter")]] = 0
    first: Annotated[Optional[IntWrapper], Service("first")] = None
    other: Annotated[int, "unrelated metadata"] = 0
    second: Annotated[Optional[IntWrapper], Service("second", optional=True)] = None


@dataclass
class Extended(Mixed):
    third: Annotated[Optional[IntWrapper], Service("third")] = None


@dataclass
class BadEmbedded:
    values: Annotated[Optional[Union[int, str]], Embedded()] = None


def test_only_marked_fields_are_described():
    assert [spec.name for spec in field_specs(Mixed)] == ["first", "second"]


def test_base_class_fields_come_first():
    assert [spec.name for spec in field_specs(Extended)] == ["first", "second", "third"]
    assert [spec.name for spec in field_specs(InheritedProcess)] == ["value"]


def test_unresolvable_unmarked_annotations_are_skipped():
    (spec,) = field_specs(PricedProcess)
    assert spec.name == "value"
    assert spec.declared_type == Optional[IntWrapper]


def test_service_field_spec():
    (spec,) = field_specs(SimpleProcess)
    assert spec.service == Service("value")
    assert spec.declared_type == Optional[IntWrapper]
    assert not spec.embedded


def test_embedded_field_spec():
    (spec,) = field_specs(EmbeddedProcess)
    assert spec.embedded
    assert spec.embedded_class is SimpleProcess
    assert spec.service is None


def test_field_specs_are_cached():
    assert field_specs(Mixed) is field_specs(Mixed)


def test_embedded_field_must_be_a_class():
    with pytest.raises(InvalidFieldError, match="embedded field 'values' must be annotated with a class"):
        field_specs(BadEmbedded)


@pytest.mark.parametrize(
    "optional, expected",
    [
        (None, False),
        ("", False),
        (True, True),
        (False, False),
        ("true", True),
        ("1", True),
        ("T", True),
        ("False", False),
        ("0", False),
        ("f", False),
    ],
)
def test_parse_optional(optional, expected):
    spec = FieldSpec("value", IntWrapper, Service("value", optional=optional), None)
    assert parse_optional(spec) is expected


@pytest.mark.parametrize("optional", ["yup", "yes", 1])
def test_parse_optional_rejects_non_booleans(optional):
    spec = FieldSpec("value", IntWrapper, Service("value", optional=optional), None)
    with pytest.raises(InvalidTagError, match="field 'value' has an invalid optional tag"):
        parse_optional(spec)
