"""Graph population.

Fills an already constructed instance in place, in three passes:

1. writable attributes get manufactured values through the setter
2. read-only attributes holding a nested object are populated recursively
3. auxiliary methods named by the introspector are called with
   manufactured arguments

An empty container instance is filled before any of that.
"""

import collections.abc
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.models.types import AttributeDescriptor, DepthLedger
from .builder import manufacture_arguments, signature_parameters
from .containers import is_immutable
from .introspection import type_hints
from .resolver import (
    SubstitutionMap,
    container_arguments,
    pad_type_arguments,
    resolve_type,
)

if TYPE_CHECKING:
    from .orchestrator import FixtureFactory

logger = logging.getLogger(__name__)

# Values of these types are never descended into
_SCALARS = (bool, int, float, complex, str, bytes, bytearray, Enum, type)

_MISSING = object()


class GraphPopulator:
    """Populates the attributes of an existing instance."""

    def __init__(self, factory: "FixtureFactory") -> None:
        self._factory = factory

    def populate(
        self,
        instance: Any,
        ledger: DepthLedger,
        substitutions: SubstitutionMap | None = None,
        type_args: tuple = (),
    ) -> Any:
        cls = type(instance)
        if substitutions is None:
            substitutions = SubstitutionMap.for_class(cls, type_args)

        self._fill_if_empty(instance, ledger, substitutions)

        excluded = tuple(self._factory.provider.excluded_directive_kinds())
        read_only: list[AttributeDescriptor] = []
        for attribute in self._factory.introspector.attributes(cls):
            if excluded and any(isinstance(d, excluded) for d in attribute.directives):
                logger.debug("Skipping excluded attribute %s.%s", cls.__qualname__, attribute.name)
                continue
            if attribute.writable:
                self._assign(instance, attribute, ledger, substitutions)
            elif attribute.read_only:
                read_only.append(attribute)

        for attribute in read_only:
            self._descend(instance, attribute, ledger, substitutions)

        for name in self._factory.introspector.extra_methods(cls):
            self._invoke(instance, name, ledger, substitutions)

        return instance

    def _fill_if_empty(
        self, instance: Any, ledger: DepthLedger, substitutions: SubstitutionMap
    ) -> None:
        if not isinstance(instance, collections.abc.Collection) or len(instance):
            return
        if isinstance(instance, (str, bytes, bytearray)) or is_immutable(instance):
            return
        cls = type(instance)
        filler = self._factory.filler
        if isinstance(instance, collections.abc.MutableMapping):
            key, value = container_arguments(cls, substitutions, collections.abc.Mapping, 2)
            filler.fill_mapping(instance, key, value, ledger, substitutions=substitutions)
        else:
            (element,) = container_arguments(cls, substitutions, collections.abc.Iterable, 1)
            filler.fill_collection(instance, element, ledger, substitutions=substitutions)

    def _assign(
        self,
        instance: Any,
        attribute: AttributeDescriptor,
        ledger: DepthLedger,
        substitutions: SubstitutionMap,
    ) -> None:
        current = self._current_value(instance, attribute)
        value = self._factory.manufacture_value(
            attribute.type_hint, ledger, substitutions=substitutions, current=current
        )
        if value is None:
            logger.warning(
                "Couldn't find a value for %s.%s, leaving it untouched",
                type(instance).__qualname__,
                attribute.name,
            )
            return
        attribute.setter(instance, value)

    def _current_value(self, instance: Any, attribute: AttributeDescriptor) -> Any:
        """The attribute's value when the instance owns it, else None.

        A value shared with the class (``tags: list[str] = []``) is never
        refilled in place.
        """
        if attribute.getter is None:
            return None
        try:
            current = attribute.getter(instance)
        except Exception as e:
            logger.debug(
                "Cannot read %s.%s before assigning it: %s",
                type(instance).__qualname__,
                attribute.name,
                e,
            )
            return None
        if current is not None and current is getattr(type(instance), attribute.name, _MISSING):
            return None
        return current

    def _descend(
        self,
        instance: Any,
        attribute: AttributeDescriptor,
        ledger: DepthLedger,
        substitutions: SubstitutionMap,
    ) -> None:
        owner = type(instance).__qualname__
        try:
            value = attribute.getter(instance)
        except Exception as e:
            logger.warning("Cannot read %s.%s: %s", owner, attribute.name, e)
            return
        if value is None or isinstance(value, _SCALARS):
            return

        value_cls = type(value)
        max_depth = self._factory.provider.max_depth(value_cls)
        if ledger.depth(value_cls) > max_depth:
            logger.warning(
                "Loop in filling read-only field %s.%s detected, not descending",
                owner,
                attribute.name,
            )
            return

        declared = resolve_type(attribute.type_hint, substitutions)
        nested = SubstitutionMap.for_class(value_cls, pad_type_arguments(value_cls, declared.args))
        with ledger.descend(value_cls):
            self.populate(value, ledger, nested)

    def _invoke(
        self, instance: Any, name: str, ledger: DepthLedger, substitutions: SubstitutionMap
    ) -> None:
        method = getattr(instance, name, None)
        if not callable(method):
            logger.warning(
                "%s has no callable %s, skipping it", type(instance).__qualname__, name
            )
            return
        parameters, hints = signature_parameters(method, type_hints(method))
        args, kwargs = manufacture_arguments(self._factory, parameters, hints, ledger, substitutions)
        logger.debug("Calling %s.%s", type(instance).__qualname__, name)
        method(*args, **kwargs)
