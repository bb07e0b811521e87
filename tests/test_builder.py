"""Tests for construction-candidate discovery and instance building."""

import logging

import pytest

from fixtureforge import FixtureConfig, FixtureFactory, RandomValueProvider
from fixtureforge.core.models import DepthLedger
from tests.sample_types import (
    Address,
    Coordinate,
    Fragile,
    Inventory,
    Item,
    Point,
    Repository,
    Shape,
    Square,
    Ticket,
    Token,
)


class NothingExcluded(RandomValueProvider):
    def excluded_directive_kinds(self):
        return frozenset()


@pytest.fixture
def factory():
    return FixtureFactory(config=FixtureConfig(seed=3))


class TestCandidates:
    def test_constructor_parameters(self, factory):
        candidate = factory.builder.constructor(Point)
        assert candidate.kind == "constructor"
        assert [p.name for p in candidate.parameters] == ["x", "y"]
        assert candidate.hints == {"x": int, "y": int}

    def test_class_without_init_has_no_parameters(self, factory):
        candidate = factory.builder.constructor(Address)
        assert candidate.parameter_count == 0

    def test_abstract_class_has_no_constructor(self, factory):
        assert factory.builder.constructor(Shape) is None

    def test_non_public_constructor(self, factory):
        assert factory.builder.constructor(Token).kind == "non_public"

    def test_factories_return_the_class(self, factory):
        names = [c.name for c in factory.builder.factories(Shape)]
        assert names == ["Shape.unit"]
        assert [c.name for c in factory.builder.factories(Token)] == ["Token.issue"]

    def test_no_factories(self, factory):
        assert factory.builder.factories(Address) == []


class TestBuild:
    def test_dataclass(self, factory):
        point = factory.builder.build(Point, DepthLedger())
        assert isinstance(point, Point)
        assert point.x != 0 and point.y != 0

    def test_dataclass_with_default_factory(self, factory):
        inventory = factory.builder.build(Inventory, DepthLedger())
        assert len(inventory.items) == 5

    def test_named_tuple(self, factory):
        coordinate = factory.builder.build(Coordinate, DepthLedger())
        assert isinstance(coordinate, Coordinate)
        assert coordinate.lat != 0.0

    def test_pydantic_model_honors_directives(self, factory):
        for _ in range(20):
            item = factory.builder.build(Item, DepthLedger())
            assert 1 <= item.quantity <= 5

    def test_abstract_class_uses_static_factory(self, factory):
        shape = factory.builder.build(Shape, DepthLedger())
        assert isinstance(shape, Square)
        assert shape.side == 1.0

    def test_non_public_constructor_prefers_factory(self, factory):
        token = factory.builder.build(Token, DepthLedger())
        assert token.issued is True
        assert token.value == "tok"

    def test_abstract_class_without_candidates(self, factory):
        assert factory.builder.build(Repository, DepthLedger()) is None

    def test_failing_constructor_logged_at_debug(self, factory, caplog):
        with caplog.at_level(logging.DEBUG, logger="fixtureforge"):
            assert factory.builder.build(Fragile, DepthLedger()) is None
        assert "never constructible" in caplog.text
        assert all(r.levelno == logging.DEBUG for r in caplog.records if "Fragile" in r.getMessage())

    def test_excluded_constructor_argument_passed_as_none(self, factory):
        ticket = factory.builder.build(Ticket, DepthLedger())
        assert ticket.code
        assert ticket.note is None

    def test_provider_decides_which_arguments_are_excluded(self):
        factory = FixtureFactory(provider=NothingExcluded())
        ticket = factory.builder.build(Ticket, DepthLedger())
        assert isinstance(ticket.note, str) and ticket.note
