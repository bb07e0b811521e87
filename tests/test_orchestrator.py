"""Tests for FixtureFactory: dispatch, recursion, directives and fallbacks."""

import collections
import collections.abc
import warnings
from typing import Callable, Literal

import pytest

from fixtureforge import (
    Byte,
    Char,
    ConfigurationError,
    FixtureConfig,
    FixtureFactory,
    ManufactureError,
    RandomValueProvider,
    RegistryFallback,
)
from fixtureforge.cli.utils import to_plain
from fixtureforge.core.models import DirectiveBase, TypeReference
from fixtureforge.manufacture import TypeCategory, categorize
from fixtureforge.manufacture.resolver import NONE_TYPE
from tests.sample_types import (
    Address,
    BadPrecise,
    BadRange,
    Bounded,
    Box,
    Clock,
    Color,
    Coordinate,
    Fixed,
    Fragile,
    Household,
    IntBox,
    Inverted,
    Item,
    Leaf,
    MemoryRepository,
    Mismatched,
    Node,
    Order,
    Person,
    RecordingFallback,
    Repository,
    Scalars,
    Scheduler,
    Shape,
    Square,
    Strategic,
    Token,
    Wrapper,
)


class Exploding:
    @property
    def level(self) -> int:
        return 0

    @level.setter
    def level(self, value: int) -> None:
        raise RuntimeError("boom")


def chain_length(node):
    length = 0
    while node is not None:
        length += 1
        node = getattr(node, "next", None)
    return length


@pytest.fixture
def factory():
    return FixtureFactory(config=FixtureConfig(seed=42))


class TestCategorize:
    @pytest.mark.parametrize(
        "cls,expected",
        [
            (NONE_TYPE, TypeCategory.NONE),
            (int, TypeCategory.PRIMITIVE),
            (bool, TypeCategory.PRIMITIVE),
            (Byte, TypeCategory.WRAPPER),
            (Char, TypeCategory.WRAPPER),
            (str, TypeCategory.STRING),
            (bytes, TypeCategory.STRING),
            (Color, TypeCategory.ENUM),
            (Literal, TypeCategory.ENUM),
            (type, TypeCategory.GENERIC_TYPE_REFERENCE),
            (tuple, TypeCategory.ARRAY),
            (Coordinate, TypeCategory.CONCRETE_OBJECT),
            (list, TypeCategory.COLLECTION),
            (collections.deque, TypeCategory.COLLECTION),
            (collections.abc.Sequence, TypeCategory.COLLECTION),
            (dict, TypeCategory.MAP),
            (collections.Counter, TypeCategory.MAP),
            (collections.abc.Mapping, TypeCategory.MAP),
            (collections.abc.Iterator, TypeCategory.INTERFACE),
            (collections.abc.Callable, TypeCategory.INTERFACE),
            (Clock, TypeCategory.INTERFACE),
            (Repository, TypeCategory.ABSTRACT),
            (Address, TypeCategory.CONCRETE_OBJECT),
        ],
    )
    def test_categories(self, cls, expected):
        assert categorize(TypeReference(cls)) is expected


class TestScalarsAndObjects:
    def test_every_attribute_gets_a_non_default_value(self, factory):
        person = factory.manufacture(Person)
        assert person.name != ""
        assert person.age != 0
        assert person.height != 0.0
        assert person.active is True
        assert isinstance(person.address, Address)
        assert person.address.street != ""
        assert len(person.tags) == 5
        assert len(person.scores) == 5
        assert isinstance(person.color, Color)

    def test_scalar_flavours(self, factory):
        scalars = factory.manufacture(Scalars)
        assert isinstance(scalars.small, Byte)
        assert 0 < scalars.small <= Byte.MAX
        assert isinstance(scalars.letter, Char) and len(scalars.letter) == 1
        assert isinstance(scalars.payload, bytes) and scalars.payload
        assert scalars.mode in ("fast", "slow")
        assert scalars.kind is Address
        assert isinstance(scalars.color, Color)

    def test_empty_enum_is_left_unset(self, factory):
        scalars = factory.manufacture(Scalars)
        assert not hasattr(scalars, "empty")

    def test_top_level_scalars(self, factory):
        assert isinstance(factory.manufacture(int), int)
        assert factory.manufacture(Literal["only"]) == "only"
        assert factory.manufacture(type[Address]) is Address

    def test_parameterized_container_target(self, factory):
        values = factory.manufacture(list[Address])
        assert len(values) == 5
        assert all(isinstance(a, Address) for a in values)

    def test_callable_without_fallback_is_none(self, factory):
        assert factory.manufacture(Callable[[], int]) is None


class TestDepth:
    def test_default_depth_gives_two_levels(self, factory):
        assert chain_length(factory.manufacture(Node)) == 2

    def test_raised_depth(self):
        factory = FixtureFactory(config=FixtureConfig(max_depth=3))
        assert chain_length(factory.manufacture(Node)) == 4

    def test_per_class_depth(self):
        factory = FixtureFactory(config=FixtureConfig(max_depths={"Node": 0}))
        assert chain_length(factory.manufacture(Node)) == 1

    def test_depth_limit_consults_fallback(self):
        sentinel = object()
        fallback = RegistryFallback({Node: lambda: sentinel})
        factory = FixtureFactory(fallback=fallback)
        root = factory.manufacture(Node)
        assert root.next.next is sentinel


class TestDirectives:
    def test_ranges_hold_over_many_runs(self, factory):
        for _ in range(100):
            bounded = factory.manufacture(Bounded)
            assert 10 <= bounded.value <= 20
            assert 0.5 <= bounded.ratio <= 0.75
            assert len(bounded.code) == 3
            assert bounded.initial in ("a", "b", "c")

    def test_inverted_range_collapses_to_min(self, factory):
        assert factory.manufacture(Inverted).value == 30

    def test_precise_values(self, factory):
        fixed = factory.manufacture(Fixed)
        assert fixed.code == "X"
        assert fixed.count == 42
        assert fixed.color is Color.GREEN
        assert fixed.mode == "slow"

    def test_strategy_value_used_verbatim(self, factory):
        assert factory.manufacture(Strategic).token == "abc"

    @pytest.mark.parametrize("target", [BadPrecise, BadRange, Mismatched])
    def test_unsatisfiable_directives(self, factory, target):
        with pytest.raises(ConfigurationError):
            factory.manufacture(target)

    def test_custom_directive_defines_without_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")

            class Marker(DirectiveBase):
                kind: Literal["marker"] = "marker"

            assert Marker().kind == "marker"

    def test_directives_leave_pydantic_fields_alone(self, factory):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            item = Item(sku="a", quantity=30)
        assert item.quantity == 30
        assert 1 <= factory.manufacture(Item).quantity <= 5


class TestMemoization:
    def test_same_instance_across_calls(self):
        factory = FixtureFactory(config=FixtureConfig(memoize=True))
        assert factory.manufacture(Address) is factory.manufacture(Address)

    def test_shared_within_a_graph(self):
        factory = FixtureFactory(config=FixtureConfig(memoize=True))
        household = factory.manufacture(Household)
        assert household.home is household.work

    def test_disabled_by_default(self, factory):
        household = factory.manufacture(Household)
        assert household.home is not household.work


class TestGenerics:
    def test_parameterized_hint(self, factory):
        box = factory.manufacture(Box[int])
        assert isinstance(box.item, int)
        assert all(isinstance(i, int) for i in box.items)

    def test_type_arguments_passed_separately(self, factory):
        box = factory.manufacture(Box, str)
        assert isinstance(box.item, str)

    def test_bound_through_base_class(self, factory):
        assert isinstance(factory.manufacture(IntBox).item, int)
        assert isinstance(factory.manufacture(Leaf).item, str)

    def test_nested_generic_attribute(self, factory):
        wrapper = factory.manufacture(Wrapper[str])
        assert isinstance(wrapper.box, Box)
        assert isinstance(wrapper.box.item, str)

    def test_missing_type_arguments(self, factory):
        with pytest.raises(ConfigurationError, match="missing generic type arguments"):
            factory.manufacture(Box)


class TestConstructionPaths:
    def test_abstract_class_factory(self, factory):
        shape = factory.manufacture(Shape)
        assert isinstance(shape, Square)

    def test_abstract_class_concrete_substitute(self):
        provider = RandomValueProvider(concrete_types={Repository: MemoryRepository})
        repository = FixtureFactory(provider=provider).manufacture(Repository)
        assert isinstance(repository, MemoryRepository)
        assert repository.label

    def test_non_public_constructor(self, factory):
        token = factory.manufacture(Token)
        assert token.issued is True

    def test_failed_construction_uses_fallback(self):
        fallback = RecordingFallback("substitute")
        assert FixtureFactory(fallback=fallback).manufacture(Fragile) == "substitute"
        assert fallback.calls == [Fragile]

    def test_failed_construction_without_fallback(self, factory):
        assert factory.manufacture(Fragile) is None

    def test_pydantic_model(self, factory):
        order = factory.manufacture(Order)
        assert order.reference
        assert len(order.items) == 5
        assert all(1 <= item.quantity <= 5 for item in order.items)
        assert len(order.notes) == 5


class TestFallback:
    def test_interface_value_used_verbatim(self):
        clock = object()
        fallback = RecordingFallback(clock)
        scheduler = FixtureFactory(fallback=fallback).manufacture(Scheduler)
        assert scheduler.clock is clock
        assert fallback.calls == [Clock]

    def test_interface_without_fallback_left_untouched(self, factory):
        scheduler = factory.manufacture(Scheduler)
        assert not hasattr(scheduler, "clock")
        assert scheduler.name


class TestEntryPoints:
    def test_populate_existing_instance(self, factory):
        address = Address()
        assert factory.populate(address) is address
        assert address.city

    def test_populate_generic_instance(self, factory):
        box = factory.populate(Box(), int)
        assert isinstance(box.item, int)

    def test_unexpected_errors_are_wrapped(self, factory):
        with pytest.raises(ManufactureError) as excinfo:
            factory.manufacture(Exploding)
        assert not isinstance(excinfo.value, ConfigurationError)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_seeded_factories_agree(self):
        first = FixtureFactory(config=FixtureConfig(seed=7)).manufacture(Person)
        second = FixtureFactory(config=FixtureConfig(seed=7)).manufacture(Person)
        assert to_plain(first) == to_plain(second)
