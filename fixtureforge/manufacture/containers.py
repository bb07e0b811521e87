"""Container filling.

Collections and mappings are brought to a target element count: shrunk
when larger, topped up with manufactured (or strategy-supplied) slots when
smaller. Tuples are always built fresh. Immutable containers are left as
they are, with a warning.

The count comes from an ``ElementCount`` directive when present, otherwise
from ``provider.element_count`` for the element class (the value class for
mappings).
"""

import collections
import collections.abc
import logging
import types
import weakref
from typing import TYPE_CHECKING, Any, Sequence

from ..core.models.directives import AttributeStrategy, ElementCount, find_directive
from ..core.models.types import DepthLedger, TypeReference
from .resolver import SubstitutionMap, container_arguments

if TYPE_CHECKING:
    from .orchestrator import FixtureFactory

logger = logging.getLogger(__name__)

_IMMUTABLE = (tuple, frozenset, types.MappingProxyType)
_RETRIES_PER_ELEMENT = 10


def is_immutable(container: Any) -> bool:
    if isinstance(container, _IMMUTABLE):
        return True
    if isinstance(container, collections.abc.Mapping):
        return not isinstance(container, collections.abc.MutableMapping)
    return not isinstance(
        container, (collections.abc.MutableSequence, collections.abc.MutableSet)
    )


def _is_concrete(cls: Any) -> bool:
    if not isinstance(cls, type) or cls.__module__ == "collections.abc":
        return False
    return not getattr(cls, "__abstractmethods__", None)


class ContainerFiller:
    """Fills collections, mappings and tuples with manufactured elements."""

    def __init__(self, factory: "FixtureFactory") -> None:
        self._factory = factory

    # ── Counts and slots ──

    def count_for(self, directives: Sequence[Any], element: TypeReference) -> int:
        element_count = find_directive(directives, ElementCount)
        if element_count is not None and element_count.count is not None:
            return element_count.count
        return self._factory.provider.element_count(element.cls)

    def _slot(
        self,
        ref: TypeReference,
        strategy: AttributeStrategy | None,
        ledger: DepthLedger,
        substitutions: SubstitutionMap | None,
    ) -> Any:
        if strategy is not None:
            value = strategy.value()
            self._factory.check_assignable(value, ref, strategy)
            return value
        return self._factory.manufacture_value(ref, ledger, substitutions=substitutions)

    # ── Filling existing containers ──

    def fill_collection(
        self,
        collection: Any,
        element: TypeReference,
        ledger: DepthLedger,
        directives: Sequence[Any] = (),
        substitutions: SubstitutionMap | None = None,
    ) -> Any:
        """Bring ``collection`` to the target count in place."""
        if is_immutable(collection):
            logger.warning("Cannot fill immutable collection %s", type(collection).__qualname__)
            return collection

        count = self.count_for(directives, element)
        element_count = find_directive(directives, ElementCount)
        strategy = element_count.element if element_count is not None else None

        if isinstance(collection, list):
            del collection[count:]
        else:
            while len(collection) > count:
                collection.pop()

        add = collection.add if isinstance(collection, collections.abc.MutableSet) else collection.append
        attempts = 0
        while len(collection) < count and attempts < count * _RETRIES_PER_ELEMENT:
            attempts += 1
            add(self._slot(element, strategy, ledger, substitutions))

        if len(collection) < count:
            logger.warning(
                "Could only add %d of %d distinct %s elements to %s",
                len(collection),
                count,
                element.name,
                type(collection).__qualname__,
            )
        return collection

    def fill_mapping(
        self,
        mapping: Any,
        key: TypeReference,
        value: TypeReference,
        ledger: DepthLedger,
        directives: Sequence[Any] = (),
        substitutions: SubstitutionMap | None = None,
    ) -> Any:
        """Bring ``mapping`` to the target count in place."""
        if is_immutable(mapping):
            logger.warning("Cannot fill immutable map %s", type(mapping).__qualname__)
            return mapping

        count = self.count_for(directives, value)
        element_count = find_directive(directives, ElementCount)
        key_strategy = element_count.key if element_count is not None else None
        value_strategy = element_count.value if element_count is not None else None
        # Weak-value maps cannot hold None
        skip_none = isinstance(mapping, weakref.WeakValueDictionary)

        while len(mapping) > count:
            mapping.popitem()

        attempts = 0
        while len(mapping) < count and attempts < count * _RETRIES_PER_ELEMENT:
            attempts += 1
            map_key = self._slot(key, key_strategy, ledger, substitutions)
            map_value = self._slot(value, value_strategy, ledger, substitutions)
            if map_value is None and skip_none:
                logger.warning(
                    "Skipping None value for key %r in %s", map_key, type(mapping).__qualname__
                )
                continue
            mapping[map_key] = map_value

        if len(mapping) < count:
            logger.warning(
                "Could only add %d of %d distinct %s keys to %s",
                len(mapping),
                count,
                key.name,
                type(mapping).__qualname__,
            )
        return mapping

    # ── Producing containers ──

    def make_collection(
        self,
        ref: TypeReference,
        ledger: DepthLedger,
        directives: Sequence[Any] = (),
        current: Any = None,
    ) -> Any:
        """A filled collection for ``ref``, reusing ``current`` when it is mutable."""
        cls = ref.cls
        substitutions = SubstitutionMap.for_class(cls, ref.args)
        (element,) = container_arguments(cls, substitutions, collections.abc.Iterable, 1)

        if current is not None and not is_immutable(current) and not isinstance(
            current, collections.abc.Mapping
        ):
            return self.fill_collection(current, element, ledger, directives, substitutions)

        if issubclass(cls, frozenset):
            filled = self.fill_collection(set(), element, ledger, directives, substitutions)
            return cls(filled)

        collection = None
        if _is_concrete(cls):
            try:
                collection = cls()
            except Exception as e:
                logger.warning("Cannot instantiate %s: %s. Using a default", cls.__qualname__, e)
        if collection is None:
            collection = set() if issubclass(cls, collections.abc.Set) else []
        return self.fill_collection(collection, element, ledger, directives, substitutions)

    def make_mapping(
        self,
        ref: TypeReference,
        ledger: DepthLedger,
        directives: Sequence[Any] = (),
        current: Any = None,
    ) -> Any:
        """A filled mapping for ``ref``, reusing ``current`` when it is mutable."""
        cls = ref.cls
        substitutions = SubstitutionMap.for_class(cls, ref.args)
        if issubclass(cls, collections.Counter):
            (key,) = container_arguments(cls, substitutions, collections.abc.Mapping, 1)
            value = TypeReference(int)
        else:
            key, value = container_arguments(cls, substitutions, collections.abc.Mapping, 2)

        if isinstance(current, collections.abc.MutableMapping):
            return self.fill_mapping(current, key, value, ledger, directives, substitutions)

        if cls is types.MappingProxyType:
            filled = self.fill_mapping({}, key, value, ledger, directives, substitutions)
            return types.MappingProxyType(filled)

        mapping = None
        if _is_concrete(cls):
            try:
                mapping = cls()
            except Exception as e:
                logger.warning("Cannot instantiate %s: %s. Using a default", cls.__qualname__, e)
        if mapping is None:
            mapping = {}
        return self.fill_mapping(mapping, key, value, ledger, directives, substitutions)

    def make_array(
        self,
        ref: TypeReference,
        ledger: DepthLedger,
        directives: Sequence[Any] = (),
    ) -> tuple:
        """A new tuple: ``count`` elements when variadic, else one per declared slot."""
        element_count = find_directive(directives, ElementCount)
        strategy = element_count.element if element_count is not None else None
        if not ref.variadic:
            return tuple(self._slot(arg, strategy, ledger, None) for arg in ref.args)
        element = ref.arg(0)
        count = self.count_for(directives, element)
        return tuple(self._slot(element, strategy, ledger, None) for _ in range(count))

