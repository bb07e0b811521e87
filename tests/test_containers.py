"""Tests for container filling."""

import collections
import logging
import types
import weakref

import pytest

from fixtureforge import ConfigurationError, ConstantStrategy, ElementCount, FixtureConfig, FixtureFactory
from fixtureforge.core.models import DepthLedger, TypeReference
from tests.sample_types import Address, BadElements, Bag, Containers, Names, Prefilled, Sized

INT = TypeReference(int)
STR = TypeReference(str)


@pytest.fixture
def factory():
    return FixtureFactory(config=FixtureConfig(element_count=4, seed=5))


class TestFillCollection:
    def test_fills_to_count(self, factory):
        collection = factory.filler.fill_collection([], INT, DepthLedger())
        assert len(collection) == 4
        assert all(isinstance(v, int) for v in collection)

    def test_truncates_when_larger(self, factory):
        collection = list(range(10))
        factory.filler.fill_collection(collection, INT, DepthLedger())
        assert collection == [0, 1, 2, 3]

    def test_tops_up_without_removing(self, factory):
        collection = [100, 200]
        factory.filler.fill_collection(collection, INT, DepthLedger())
        assert collection[:2] == [100, 200]
        assert len(collection) == 4

    def test_deque_is_truncated(self, factory):
        queue = collections.deque(range(6))
        factory.filler.fill_collection(queue, INT, DepthLedger())
        assert len(queue) == 4

    def test_set_collisions_are_bounded(self, factory, caplog):
        directives = (ElementCount(count=3, element=ConstantStrategy(1)),)
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            values = factory.filler.fill_collection(set(), INT, DepthLedger(), directives)
        assert values == {1}
        assert "Could only add 1 of 3" in caplog.text

    def test_immutable_collection_unchanged(self, factory, caplog):
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            result = factory.filler.fill_collection((1, 2), INT, DepthLedger())
        assert result == (1, 2)
        assert "Cannot fill immutable collection tuple" in caplog.text

    def test_incompatible_element_strategy(self, factory):
        directives = (ElementCount(count=1, element=ConstantStrategy("x")),)
        with pytest.raises(ConfigurationError, match="cannot be assigned"):
            factory.filler.fill_collection([], INT, DepthLedger(), directives)


class TestFillMapping:
    def test_count_follows_value_class(self):
        factory = FixtureFactory(
            config=FixtureConfig(element_count=2, element_counts={"Address": 3})
        )
        mapping = factory.filler.fill_mapping({}, STR, TypeReference(Address), DepthLedger())
        assert len(mapping) == 3
        assert all(isinstance(v, Address) for v in mapping.values())

    def test_truncates_when_larger(self, factory):
        mapping = {str(i): i for i in range(8)}
        factory.filler.fill_mapping(mapping, STR, INT, DepthLedger())
        assert len(mapping) == 4

    def test_immutable_mapping_unchanged(self, factory, caplog):
        proxy = types.MappingProxyType({})
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            factory.filler.fill_mapping(proxy, STR, INT, DepthLedger())
        assert len(proxy) == 0
        assert "Cannot fill immutable map" in caplog.text

    def test_weak_value_map_skips_none(self, factory, caplog):
        mapping = weakref.WeakValueDictionary()
        directives = (ElementCount(count=1, value=ConstantStrategy(None)),)
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            factory.filler.fill_mapping(mapping, STR, TypeReference(Address), DepthLedger(), directives)
        assert len(mapping) == 0
        assert "Skipping None value" in caplog.text


class TestMakeContainers:
    def test_every_container_kind(self, factory):
        containers = factory.manufacture(Containers)
        assert len(containers.numbers) == 4
        assert isinstance(containers.unique, set) and len(containers.unique) == 4
        assert isinstance(containers.frozen, frozenset) and len(containers.frozen) == 4
        assert isinstance(containers.queue, collections.deque) and len(containers.queue) == 4
        assert len(containers.lookup) == 4
        assert all(isinstance(v, int) for v in containers.lookup.values())
        assert isinstance(containers.ordered, collections.OrderedDict)
        assert all(isinstance(v, float) for v in containers.ordered.values())
        assert isinstance(containers.counts, collections.Counter)
        assert all(isinstance(v, int) for v in containers.counts.values())

    def test_arrays(self, factory):
        containers = factory.manufacture(Containers)
        assert isinstance(containers.pair, tuple)
        assert isinstance(containers.pair[0], int) and isinstance(containers.pair[1], str)
        assert len(containers.many) == 4
        assert all(isinstance(v, str) for v in containers.many)

    def test_element_count_directives(self, factory):
        sized = factory.manufacture(Sized)
        assert len(sized.three) == 3
        assert sized.none == {}
        assert sized.sevens == [7, 7, 7, 7]
        assert sized.single == {1}
        assert list(sized.keyed) == ["k"]

    def test_bad_element_strategy_is_fatal(self, factory):
        with pytest.raises(ConfigurationError):
            factory.manufacture(BadElements)

    def test_container_subclass_with_generic_base(self, factory):
        names = factory.manufacture(Names)
        assert isinstance(names, Names)
        assert len(names) == 4
        assert all(isinstance(n, str) for n in names)

    def test_abstract_declarations_get_defaults(self, factory):
        from collections.abc import Mapping, Sequence, Set

        assert isinstance(factory.manufacture(Sequence[int]), list)
        assert isinstance(factory.manufacture(Set[int]), set)
        assert isinstance(factory.manufacture(Mapping[str, int]), dict)

    def test_mapping_proxy_is_built_from_a_dict(self, factory):
        proxy = factory.manufacture(types.MappingProxyType[str, int])
        assert isinstance(proxy, types.MappingProxyType)
        assert len(proxy) == 4


class TestRefill:
    def test_refill_is_idempotent(self, factory):
        bag = factory.manufacture(Bag)
        items = bag.items
        factory.populate(bag)
        assert bag.items is items
        assert len(bag.items) == 4

    def test_existing_container_is_truncated(self, factory):
        prefilled = factory.manufacture(Prefilled)
        assert prefilled.items == [1, 2, 3, 4]
