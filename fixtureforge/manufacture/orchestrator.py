"""Manufacture orchestrator.

FixtureFactory is the entry point. It resolves a hint, classifies the
result and dispatches:

    scalar / string / enum  -> value provider
    tuple / collection / map -> ContainerFiller
    object                   -> InstanceBuilder + GraphPopulator

Attribute and element values recurse back through ``manufacture_value``
under the same DepthLedger, so self-referencing graphs stop once a class
has been entered ``max_depth + 1`` times.

Example:
    factory = FixtureFactory(config=FixtureConfig(seed=7))
    order = factory.manufacture(Order)
    page = factory.manufacture(Page[Order])
    box = factory.manufacture(Box, int)
"""

import collections
import collections.abc
import inspect
import logging
import types
from dataclasses import replace
from enum import Enum
from typing import Any, Literal, Sequence

from ..config import FixtureConfig
from ..core.models.directives import (
    AttributeStrategy,
    Precise,
    Range,
    UseStrategy,
    find_directive,
)
from ..core.models.scalars import (
    DOUBLE_MAX,
    DOUBLE_MIN,
    FIXED_WIDTH_TYPES,
    INT_MAX,
    INT_MIN,
    Byte,
    Char,
    Float32,
    Long,
    Short,
)
from ..core.models.types import DepthLedger, TypeReference
from ..core.providers import RandomValueProvider, ValueProvider
from .builder import InstanceBuilder
from .containers import ContainerFiller
from .errors import ConfigurationError, ManufactureError
from .fallback import ExternalProductionFallback, NullFallback
from .introspection import ClassIntrospector, ConventionIntrospector
from .populator import GraphPopulator
from .resolver import NONE_TYPE, SubstitutionMap, resolve_type

logger = logging.getLogger(__name__)


class TypeCategory(str, Enum):
    """Dispatch category of a resolved type."""

    NONE = "none"
    PRIMITIVE = "primitive"
    WRAPPER = "wrapper"
    STRING = "string"
    ENUM = "enum"
    ARRAY = "array"
    COLLECTION = "collection"
    MAP = "map"
    GENERIC_TYPE_REFERENCE = "generic_type_reference"
    INTERFACE = "interface"
    ABSTRACT = "abstract"
    CONCRETE_OBJECT = "concrete_object"


_COLLECTION_ABCS = frozenset(
    {
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)
_MAPPING_ABCS = frozenset({collections.abc.Mapping, collections.abc.MutableMapping})


def categorize(ref: TypeReference) -> TypeCategory:
    cls = ref.cls
    if cls is NONE_TYPE:
        return TypeCategory.NONE
    if cls is Literal:
        return TypeCategory.ENUM
    if not isinstance(cls, type):
        return TypeCategory.INTERFACE
    if issubclass(cls, FIXED_WIDTH_TYPES):
        return TypeCategory.WRAPPER
    if issubclass(cls, Enum):
        return TypeCategory.ENUM
    if issubclass(cls, (bool, int, float, complex)):
        return TypeCategory.PRIMITIVE
    if issubclass(cls, (str, bytes, bytearray)):
        return TypeCategory.STRING
    if cls is type:
        return TypeCategory.GENERIC_TYPE_REFERENCE
    if cls is tuple:
        return TypeCategory.ARRAY
    if issubclass(cls, tuple):
        # NamedTuple and friends are built like any other class
        return TypeCategory.CONCRETE_OBJECT
    if (
        issubclass(cls, (dict, types.MappingProxyType))
        or any(base in _MAPPING_ABCS for base in cls.__mro__)
    ):
        return TypeCategory.MAP
    if issubclass(cls, collections.abc.Iterator):
        return TypeCategory.INTERFACE
    if (
        issubclass(cls, (list, set, frozenset, collections.deque))
        or any(base in _COLLECTION_ABCS for base in cls.__mro__)
    ):
        return TypeCategory.COLLECTION
    if getattr(cls, "_is_protocol", False) or cls.__module__ == "collections.abc":
        return TypeCategory.INTERFACE
    if inspect.isabstract(cls):
        return TypeCategory.ABSTRACT
    return TypeCategory.CONCRETE_OBJECT


# Scalar class -> (unranged getter, ranged getter, natural min, natural max).
# Getters are provider method names.
_SCALAR_GETTERS: dict[type, tuple[str, str | None, Any, Any]] = {
    bool: ("get_boolean", None, None, None),
    int: ("get_int", "get_int_in_range", INT_MIN, INT_MAX),
    float: ("get_double", "get_double_in_range", DOUBLE_MIN, DOUBLE_MAX),
    Byte: ("get_byte", "get_byte_in_range", Byte.MIN, Byte.MAX),
    Short: ("get_short", "get_short_in_range", Short.MIN, Short.MAX),
    Long: ("get_long", "get_long_in_range", Long.MIN, Long.MAX),
    Char: ("get_char", "get_char_in_range", Char.MIN, Char.MAX),
    Float32: ("get_float", "get_float_in_range", Float32.MIN, Float32.MAX),
}

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


class FixtureFactory:
    """Builds fully populated instance graphs for arbitrary types.

    Args:
        provider: Scalar values and manufacturing policies. Defaults to a
            RandomValueProvider built from ``config``.
        introspector: Attribute discovery. Defaults to ConventionIntrospector.
        fallback: Used when the engine cannot build a value itself.
            Defaults to NullFallback.
        config: Used only to build the default provider.

    A factory holds no per-call state and may be shared between threads.
    """

    def __init__(
        self,
        provider: ValueProvider | None = None,
        introspector: ClassIntrospector | None = None,
        fallback: ExternalProductionFallback | None = None,
        config: FixtureConfig | None = None,
    ) -> None:
        self.provider = provider or RandomValueProvider(config or FixtureConfig())
        self.introspector = introspector or ConventionIntrospector()
        self.fallback = fallback or NullFallback()
        self._builder = InstanceBuilder(self)
        self._filler = ContainerFiller(self)
        self._populator = GraphPopulator(self)

    @property
    def builder(self) -> InstanceBuilder:
        return self._builder

    @property
    def filler(self) -> ContainerFiller:
        return self._filler

    @property
    def populator(self) -> GraphPopulator:
        return self._populator

    # =========================================================================
    # Top-level calls
    # =========================================================================

    def manufacture(self, target: Any, *type_args: Any) -> Any:
        """Manufacture a fully populated value of ``target``.

        ``target`` is a class (with its generic arguments in ``type_args``)
        or a parameterized hint such as ``Page[Order]``.

        Raises:
            ConfigurationError: The request or its directives cannot be
                satisfied.
            ManufactureError: Anything else went wrong; the cause is chained.
        """
        try:
            ref = resolve_type(target)
            if type_args:
                ref = replace(ref, args=ref.args + tuple(resolve_type(a) for a in type_args))
            return self.manufacture_value(ref, DepthLedger())
        except ManufactureError:
            raise
        except Exception as e:
            raise ManufactureError(f"Failed to manufacture {target!r}: {e}") from e

    def populate(self, instance: Any, *type_args: Any) -> Any:
        """Populate an existing instance in place and return it."""
        cls = type(instance)
        ledger = DepthLedger()
        try:
            substitutions = SubstitutionMap.for_class(cls, type_args)
            with ledger.descend(cls):
                return self._populator.populate(instance, ledger, substitutions)
        except ManufactureError:
            raise
        except Exception as e:
            raise ManufactureError(
                f"Failed to populate {cls.__qualname__} instance: {e}"
            ) from e

    # =========================================================================
    # Recursion entry
    # =========================================================================

    def manufacture_value(
        self,
        hint: Any,
        ledger: DepthLedger,
        *,
        directives: Sequence[Any] = (),
        substitutions: SubstitutionMap | None = None,
        current: Any = None,
    ) -> Any:
        """Manufacture a value for ``hint`` inside an ongoing call.

        ``hint`` may be a typing hint or an already resolved TypeReference.
        ``directives`` are combined with those carried by the hint.
        ``current`` is the attribute's present value; mutable containers
        are refilled in place instead of being replaced.
        """
        ref = hint if isinstance(hint, TypeReference) else resolve_type(hint, substitutions)
        directives = tuple(directives) + ref.directives

        use_strategy = find_directive(directives, UseStrategy)
        if use_strategy is not None:
            value = use_strategy.strategy.value()
            self.check_assignable(value, ref, use_strategy.strategy)
            logger.debug("Value for %r supplied by %r", ref, use_strategy.strategy)
            return value

        category = categorize(ref)
        if category is TypeCategory.NONE:
            return None
        if category in (TypeCategory.PRIMITIVE, TypeCategory.WRAPPER):
            return self._scalar(ref, directives)
        if category is TypeCategory.STRING:
            return self._string(ref, directives)
        if category is TypeCategory.ENUM:
            return self._enum(ref, directives)
        if category is TypeCategory.GENERIC_TYPE_REFERENCE:
            return ref.arg(0).cls
        if category is TypeCategory.ARRAY:
            return self._filler.make_array(ref, ledger, directives)
        if category is TypeCategory.COLLECTION:
            return self._filler.make_collection(ref, ledger, directives, current)
        if category is TypeCategory.MAP:
            return self._filler.make_mapping(ref, ledger, directives, current)
        if category is TypeCategory.INTERFACE:
            return self._interface(ref, ledger, directives)
        if category is TypeCategory.ABSTRACT:
            return self._abstract(ref, ledger, directives)
        return self._object(ref, ledger, use_fallback=True)

    # =========================================================================
    # Objects
    # =========================================================================

    def _interface(
        self, ref: TypeReference, ledger: DepthLedger, directives: Sequence[Any]
    ) -> Any:
        concrete = self.provider.choose_concrete_class(ref.cls)
        if concrete is not None and concrete is not ref.cls:
            logger.debug("Using %s in place of %s", concrete.__qualname__, ref.name)
            return self.manufacture_value(
                replace(ref, cls=concrete, directives=()), ledger, directives=directives
            )
        return self._delegate(ref)

    def _abstract(
        self, ref: TypeReference, ledger: DepthLedger, directives: Sequence[Any]
    ) -> Any:
        instance = self._object(ref, ledger, use_fallback=False)
        if instance is not None:
            return instance
        concrete = self.provider.choose_concrete_class(ref.cls)
        if concrete is not None and concrete is not ref.cls:
            logger.debug("Using %s in place of %s", concrete.__qualname__, ref.name)
            return self.manufacture_value(
                replace(ref, cls=concrete, directives=()), ledger, directives=directives
            )
        return self._delegate(ref)

    def _object(self, ref: TypeReference, ledger: DepthLedger, use_fallback: bool) -> Any:
        cls = ref.cls
        memoize = self.provider.memoization_enabled()
        if memoize:
            cached = self.provider.get_memoized(ref)
            if cached is not None:
                logger.debug("Reusing memoized %r", ref)
                return cached

        max_depth = self.provider.max_depth(cls)
        if ledger.depth(cls) > max_depth:
            logger.warning(
                "Depth limit %d reached for %s, not descending further", max_depth, ref.name
            )
            return self._delegate(ref) if use_fallback else None

        with ledger.descend(cls):
            substitutions = SubstitutionMap.for_class(cls, ref.args)
            instance = self._builder.build(cls, ledger, substitutions=substitutions)
            if instance is None:
                logger.warning("Couldn't create %s with any construction candidate", ref.name)
                return self._delegate(ref) if use_fallback else None
            if memoize:
                self.provider.memoize(ref, instance)
            return self._populator.populate(instance, ledger, substitutions)

    def _delegate(self, ref: TypeReference) -> Any:
        logger.info("Delegating %s to external fallback", ref.name)
        return self.fallback.manufacture(ref.cls, ref.args)

    # =========================================================================
    # Scalars
    # =========================================================================

    def _scalar(self, ref: TypeReference, directives: Sequence[Any]) -> Any:
        cls = ref.cls
        precise = find_directive(directives, Precise)
        if precise is not None:
            return self._convert(precise.value, cls)

        getter_name, ranged_name, natural_min, natural_max = _scalar_getters(cls)
        bounds = find_directive(directives, Range)
        if bounds is not None:
            if ranged_name is None:
                raise ConfigurationError(f"Range is not supported for {ref.name}")
            low = natural_min if bounds.min is None else self._bound(bounds.min, cls)
            high = natural_max if bounds.max is None else self._bound(bounds.max, cls)
            if low > high:
                high = low
            value = getattr(self.provider, ranged_name)(low, high)
        elif getter_name is None:
            value = complex(self.provider.get_double(), self.provider.get_double())
        else:
            value = getattr(self.provider, getter_name)()

        return value if type(value) is cls else cls(value)

    def _string(self, ref: TypeReference, directives: Sequence[Any]) -> Any:
        cls = ref.cls
        precise = find_directive(directives, Precise)
        if precise is not None:
            return self._convert(precise.value, cls)

        bounds = find_directive(directives, Range)
        if bounds is not None:
            low = self._length(bounds.min, 0)
            high = self._length(bounds.max, max(low, self.provider.string_length()))
            if low > high:
                high = low
            value = self.provider.get_string_of_length(self.provider.get_int_in_range(low, high))
        else:
            value = self.provider.get_string()

        if issubclass(cls, (bytes, bytearray)):
            return cls(value.encode())
        return value if type(value) is cls else cls(value)

    def _enum(self, ref: TypeReference, directives: Sequence[Any]) -> Any:
        members = list(ref.values) if ref.cls is Literal else list(ref.cls)
        precise = find_directive(directives, Precise)
        if precise is not None:
            return self._select_member(ref, members, precise.value)
        if not members:
            logger.warning("%r has no members, leaving the value unset", ref)
            return None
        return members[self.provider.get_int_in_range(0, len(members) - 1)]

    def _select_member(self, ref: TypeReference, members: list[Any], wanted: Any) -> Any:
        for member in members:
            if member == wanted or member is wanted:
                return member
            if isinstance(member, Enum) and wanted in (member.name, member.value):
                return member
        raise ConfigurationError(f"Precise value {wanted!r} is not a member of {ref!r}")

    def _convert(self, value: Any, cls: type) -> Any:
        try:
            if issubclass(cls, bool):
                return _to_bool(value)
            if issubclass(cls, (bytes, bytearray)) and isinstance(value, str):
                return cls(value.encode())
            if issubclass(cls, Char) and len(str(value)) != 1:
                raise ValueError("expected a single character")
            return value if type(value) is cls else cls(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigurationError(
                f"Precise value {value!r} cannot be converted to {cls.__qualname__}: {e}"
            ) from e

    def _bound(self, value: Any, cls: type) -> Any:
        if issubclass(cls, Char) and isinstance(value, int):
            value = chr(value)
        return self._convert(value, cls)

    def _length(self, value: Any, default: int) -> int:
        if value is None:
            return default
        try:
            length = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid string length bound {value!r}") from e
        return max(length, 0)

    # =========================================================================
    # Strategy output check
    # =========================================================================

    def check_assignable(
        self, value: Any, ref: TypeReference, strategy: AttributeStrategy
    ) -> None:
        """Raise ConfigurationError unless ``value`` fits ``ref``. None always fits."""
        if value is None or _assignable(value, ref):
            return
        raise ConfigurationError(
            f"{strategy!r} returned {type(value).__qualname__}, "
            f"which cannot be assigned to {ref!r}"
        )


def _scalar_getters(cls: type) -> tuple[str | None, str | None, Any, Any]:
    for klass in cls.__mro__:
        if klass in _SCALAR_GETTERS:
            return _SCALAR_GETTERS[klass]
    # complex
    return None, None, None, None


def _assignable(value: Any, ref: TypeReference) -> bool:
    cls = ref.cls
    if cls is object or cls is NONE_TYPE:
        return cls is object
    if cls is Literal:
        return value in ref.values
    if not isinstance(cls, type):
        return True
    if cls is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    for fixed in FIXED_WIDTH_TYPES:
        if issubclass(cls, fixed):
            return isinstance(value, fixed.__mro__[1])
    try:
        return isinstance(value, cls)
    except TypeError:
        # Protocols that are not runtime_checkable
        return True


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)
