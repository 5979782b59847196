from dataclasses import dataclass
from typing import Annotated, Any, Optional

from keywire.fields import Embedded, Service
from keywire.registry import Registry


@dataclass
class IntWrapper:
    val: int


@dataclass
class FloatWrapper:
    val: float


@dataclass(frozen=True)
class NamedKey:
    name: str

    def tag(self) -> str:
        return self.name


@dataclass(frozen=True)
class PlainKey:
    name: str


@dataclass
class SimpleProcess:
    value: Annotated[Optional[IntWrapper], Service("value")] = None


@dataclass
class EmbeddedProcess:
    simple: Annotated[Optional[SimpleProcess], Embedded()] = None


@dataclass
class DeepEmbeddedProcess:
    outer: Annotated[Optional[EmbeddedProcess], Embedded()] = None


class InheritedProcess(SimpleProcess):
    pass


@dataclass
class Settings:
    debug: bool = False


@dataclass
class NoServiceFields:
    settings: Annotated[Optional[Settings], Embedded()] = None


@dataclass
class UnallocatableEmbeddedProcess:
    wrapper: Annotated[Optional[IntWrapper], Embedded()] = None


@dataclass
class PrivateEmbeddedProcess:
    _simple: Annotated[Optional[SimpleProcess], Embedded()] = None


@dataclass
class UnsettableProcess:
    _value: Annotated[Optional[IntWrapper], Service("value")] = None


@dataclass(frozen=True)
class FrozenProcess:
    value: Annotated[Optional[IntWrapper], Service("value")] = None


@dataclass
class OptionalProcess:
    value: Annotated[Optional[IntWrapper], Service("value", optional="true")] = None


@dataclass
class BadOptionalProcess:
    value: Annotated[Optional[IntWrapper], Service("value", optional="yup")] = None


@dataclass
class TwoFieldProcess:
    first: Annotated[Optional[IntWrapper], Service("first")] = None
    second: Annotated[Optional[IntWrapper], Service("second")] = None


@dataclass
class TaggedKeyProcess:
    value: Annotated[Optional[IntWrapper], Service(NamedKey("value"))] = None


@dataclass
class NumberProcess:
    ratio: Annotated[float, Service("ratio")] = 0.0


@dataclass
class AnyProcess:
    value: Annotated[Any, Service("value")] = None


@dataclass
class OverlayProcess:
    a: Annotated[Optional[IntWrapper], Service("a")] = None
    b: Annotated[Optional[IntWrapper], Service("b")] = None
    c: Annotated[Optional[IntWrapper], Service("c")] = None
    d: Annotated[Optional[IntWrapper], Service("d")] = None


@dataclass
class PostInjectProcess:
    ivalue: Annotated[Optional[IntWrapper], Service("value")] = None
    fvalue: Optional[FloatWrapper] = None
    calls: int = 0

    def post_inject(self) -> None:
        self.calls += 1
        self.fvalue = FloatWrapper(float(self.ivalue.val))


class ErrorPostInjectProcess:
    def post_inject(self) -> None:
        raise ValueError("utoh")


@dataclass
class RootInjectProcess:
    services: Annotated[Optional[Registry], Service("registry")] = None
    child: Annotated[Optional[PostInjectProcess], Service("process")] = None

    def post_inject(self) -> None:
        self.services.inject(self.child)


class BareEmbeddedHost:
    settings: Annotated[Optional[Settings], Embedded()]


@dataclass
class HookedComponent:
    value: Annotated[Optional[IntWrapper], Service("value")] = None
    fail: bool = False
    calls: int = 0

    def post_inject(self) -> None:
        self.calls += 1
        if self.fail:
            raise ValueError("component broke")


@dataclass
class HookedHost:
    component: Annotated[Optional[HookedComponent], Embedded()] = None
    component_calls_seen: Optional[int] = None

    def post_inject(self) -> None:
        self.component_calls_seen = self.component.calls
