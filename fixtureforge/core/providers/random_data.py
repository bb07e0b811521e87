"""Random value provider.

Scalars come from a ``random.Random`` seeded from the config; strings come
from Faker seeded the same way, so two providers built from the same seeded
config produce the same values in the same order.

Unranged getters never return the type's default (0, 0.0, "", False), so a
populated attribute is always distinguishable from an untouched one.
"""

import logging
import random
import string
from typing import Any, Iterable, Mapping

from faker import Faker

from ...config import FixtureConfig
from ..models.directives import Exclude
from ..models.scalars import Byte, Long, Short
from .base import ValueProvider

logger = logging.getLogger(__name__)

_CHAR_POOL = string.ascii_letters + string.digits


class RandomValueProvider(ValueProvider):
    """Default provider driven by a FixtureConfig.

    Args:
        config: Counts, depths, string length, memoization and seed.
        concrete_types: Interface/abstract class -> concrete substitute.
        excluded: Extra directive classes that mark attributes as skipped
            (``Exclude`` is always included).
    """

    def __init__(
        self,
        config: FixtureConfig | None = None,
        *,
        concrete_types: Mapping[type, type] | None = None,
        excluded: Iterable[type] = (),
    ) -> None:
        super().__init__()
        self.config = config or FixtureConfig()
        self._rng = random.Random(self.config.seed)
        self._faker = Faker()
        if self.config.seed is not None:
            self._faker.seed_instance(self.config.seed)
        self._concrete_types = dict(concrete_types or {})
        self._excluded = frozenset({Exclude, *excluded})

    # ── Scalars ──

    def get_boolean(self) -> bool:
        # Always True so boolean attributes differ from their default
        return True

    def get_byte(self) -> int:
        return self._rng.randint(1, Byte.MAX)

    def get_byte_in_range(self, min_value: int, max_value: int) -> int:
        return self._int_in_range(min_value, max_value)

    def get_char(self) -> str:
        return self._rng.choice(_CHAR_POOL)

    def get_char_in_range(self, min_value: str, max_value: str) -> str:
        if min_value == max_value:
            return min_value
        return chr(self._rng.randint(ord(min_value), ord(max_value)))

    def get_short(self) -> int:
        return self._rng.randint(1, Short.MAX)

    def get_short_in_range(self, min_value: int, max_value: int) -> int:
        return self._int_in_range(min_value, max_value)

    def get_int(self) -> int:
        return self._non_zero(-(2**31), 2**31 - 1)

    def get_int_in_range(self, min_value: int, max_value: int) -> int:
        return self._int_in_range(min_value, max_value)

    def get_long(self) -> int:
        return self._non_zero(Long.MIN, Long.MAX)

    def get_long_in_range(self, min_value: int, max_value: int) -> int:
        return self._int_in_range(min_value, max_value)

    def get_float(self) -> float:
        return self._non_zero_unit()

    def get_float_in_range(self, min_value: float, max_value: float) -> float:
        return self._float_in_range(min_value, max_value)

    def get_double(self) -> float:
        return self._non_zero_unit()

    def get_double_in_range(self, min_value: float, max_value: float) -> float:
        return self._float_in_range(min_value, max_value)

    def get_string(self) -> str:
        return self.get_string_of_length(self.config.string_length)

    def get_string_of_length(self, length: int) -> str:
        if length <= 0:
            return ""
        value = self._faker.pystr(min_chars=None, max_chars=length)
        logger.debug("Length of returned string: %d", len(value))
        return value

    # ── Policies ──

    def element_count(self, element_type: Any) -> int:
        return self.config.element_count_for(element_type)

    def max_depth(self, cls: Any) -> int:
        return self.config.max_depth_for(cls)

    def string_length(self) -> int:
        return self.config.string_length

    def memoization_enabled(self) -> bool:
        return self.config.memoize

    def choose_concrete_class(self, cls: type) -> type:
        return self._concrete_types.get(cls, cls)

    def excluded_directive_kinds(self) -> frozenset[type]:
        return self._excluded

    # ── Helpers ──

    def _int_in_range(self, min_value: int, max_value: int) -> int:
        if min_value == max_value:
            return min_value
        return self._rng.randint(min_value, max_value)

    def _float_in_range(self, min_value: float, max_value: float) -> float:
        if min_value == max_value:
            return min_value
        r = self._rng.random()
        # Interpolate instead of min + r * (max - min), which overflows
        # for full-width bounds
        value = min_value * (1.0 - r) + max_value * r
        return min(max(value, min_value), max_value)

    def _non_zero(self, min_value: int, max_value: int) -> int:
        value = 0
        while value == 0:
            value = self._rng.randint(min_value, max_value)
        return value

    def _non_zero_unit(self) -> float:
        value = 0.0
        while value == 0.0:
            value = self._rng.random()
        return value
