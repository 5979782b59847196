from keywire.contexts import current_registry, reset_registry, use_registry, with_registry
from keywire.registry import Registry
from tests.fixtures import IntWrapper


def test_no_registry_by_default():
    assert current_registry() is None


def test_with_registry():
    registry = Registry()
    registry.set("a", IntWrapper(10))

    with with_registry(registry) as entered:
        assert entered is registry
        assert current_registry().get("a") == IntWrapper(10)

    assert current_registry() is None


def test_use_and_reset_registry():
    outer, inner = Registry(), Registry()
    outer_token = use_registry(outer)
    inner_token = use_registry(inner)
    assert current_registry() is inner

    reset_registry(inner_token)
    assert current_registry() is outer

    reset_registry(outer_token)
    assert current_registry() is None
