"""Abstract base class for value providers."""

import threading
from abc import ABC, abstractmethod
from typing import Any

from ..models.directives import Exclude
from ..models.types import ConstructionCandidate, TypeReference


class ValueProvider(ABC):
    """Source of scalar values and of the policies the engine consults.

    Subclasses implement the scalar getters. The policy methods
    (element counts, depth, memoization, candidate ordering, exclusions)
    have working defaults and may be overridden.

    Memoized instances are kept here, not in the factory, so their lifetime
    is controlled by whoever owns the provider. The cache is lock protected;
    implementations shared between threads must make their scalar source
    thread-safe too.
    """

    def __init__(self) -> None:
        self._memo: dict[Any, Any] = {}
        self._memo_lock = threading.Lock()

    # ── Scalars ──

    @abstractmethod
    def get_boolean(self) -> bool: ...

    @abstractmethod
    def get_byte(self) -> int: ...

    @abstractmethod
    def get_byte_in_range(self, min_value: int, max_value: int) -> int: ...

    @abstractmethod
    def get_char(self) -> str: ...

    @abstractmethod
    def get_char_in_range(self, min_value: str, max_value: str) -> str: ...

    @abstractmethod
    def get_short(self) -> int: ...

    @abstractmethod
    def get_short_in_range(self, min_value: int, max_value: int) -> int: ...

    @abstractmethod
    def get_int(self) -> int: ...

    @abstractmethod
    def get_int_in_range(self, min_value: int, max_value: int) -> int: ...

    @abstractmethod
    def get_long(self) -> int: ...

    @abstractmethod
    def get_long_in_range(self, min_value: int, max_value: int) -> int: ...

    @abstractmethod
    def get_float(self) -> float: ...

    @abstractmethod
    def get_float_in_range(self, min_value: float, max_value: float) -> float: ...

    @abstractmethod
    def get_double(self) -> float: ...

    @abstractmethod
    def get_double_in_range(self, min_value: float, max_value: float) -> float: ...

    @abstractmethod
    def get_string(self) -> str: ...

    @abstractmethod
    def get_string_of_length(self, length: int) -> str: ...

    # ── Policies ──

    @abstractmethod
    def element_count(self, element_type: Any) -> int:
        """Number of elements for containers of ``element_type``."""

    @abstractmethod
    def max_depth(self, cls: Any) -> int:
        """How many times ``cls`` may be nested in one object graph."""

    def string_length(self) -> int:
        """Upper length bound for strings when a Range leaves it open."""
        return 10

    def memoization_enabled(self) -> bool:
        return False

    def choose_concrete_class(self, cls: type) -> type:
        """Concrete substitute for an interface or abstract class.

        Returning ``cls`` itself means no substitute is known.
        """
        return cls

    def sort_constructors(self, candidates: list[ConstructionCandidate]) -> None:
        """Order constructors in place, cheapest first."""
        candidates.sort(key=lambda c: c.parameter_count)

    def sort_factories(self, candidates: list[ConstructionCandidate]) -> None:
        """Order static factories in place, most parameters first."""
        candidates.sort(key=lambda c: c.parameter_count, reverse=True)

    def excluded_directive_kinds(self) -> frozenset[type]:
        """Directive classes whose presence makes an attribute skipped."""
        return frozenset({Exclude})

    # ── Memoization cache ──

    def get_memoized(self, ref: TypeReference) -> Any | None:
        key = _memo_key(ref)
        if key is None:
            return None
        with self._memo_lock:
            return self._memo.get(key)

    def memoize(self, ref: TypeReference, instance: Any) -> None:
        key = _memo_key(ref)
        if key is None:
            return
        with self._memo_lock:
            self._memo[key] = instance

    def clear_memoization_cache(self) -> None:
        with self._memo_lock:
            self._memo.clear()


def _memo_key(ref: TypeReference) -> Any | None:
    key = ref.memo_key()
    try:
        hash(key)
    except TypeError:
        return None
    return key
