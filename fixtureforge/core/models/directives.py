"""Customization directives attached to attributes with ``typing.Annotated``.

Directives are small frozen Pydantic models. The manufacturing engine
matches over the closed set below rather than over arbitrary metadata:

- Range: numeric / character range, or string length range
- Precise: an exact value, converted to the attribute's type
- ElementCount: container size and per-element / key / value strategies
- Exclude: skip the attribute entirely
- UseStrategy: the attribute value comes from an AttributeStrategy

Example:
    class Order:
        quantity: Annotated[int, Range(min=1, max=99)]
        currency: Annotated[str, Precise(value="EUR")]
        lines: Annotated[list[Line], ElementCount(count=3)]
        audit: Annotated[AuditTrail, Exclude()]
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler


# =============================================================================
# Override strategies
# =============================================================================


class AttributeStrategy(ABC):
    """Supplies a value directly, bypassing recursive manufacture.

    The returned value is used verbatim. It must be assignment-compatible
    with the attribute (or element) type, otherwise manufacture fails with
    a ConfigurationError.
    """

    @abstractmethod
    def value(self) -> Any:
        """Return the value to assign."""


class ConstantStrategy(AttributeStrategy):
    """Always returns the same value."""

    def __init__(self, constant: Any) -> None:
        self._constant = constant

    def value(self) -> Any:
        return self._constant

    def __repr__(self) -> str:
        return f"ConstantStrategy({self._constant!r})"


class CallableStrategy(AttributeStrategy):
    """Calls a zero-argument function for every value."""

    def __init__(self, func: Callable[[], Any]) -> None:
        self._func = func

    def value(self) -> Any:
        return self._func()

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"CallableStrategy({name})"


# =============================================================================
# Directive variants
# =============================================================================


class DirectiveBase(BaseModel):
    """Base for all directives. Subclass it to define custom marker directives
    (e.g. for ``ValueProvider.excluded_directive_kinds``)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> Any:
        # As Annotated metadata on a pydantic field, leave the field's schema alone
        return handler(source)


class Range(DirectiveBase):
    """Inclusive value range.

    On numeric attributes both bounds are values; on ``Char`` they are single
    characters (or code points); on ``str`` / ``bytes`` they bound the length.
    An open side falls back to the type's natural bound.
    """

    kind: Literal["range"] = "range"
    min: int | float | str | None = None
    max: int | float | str | None = None


class Precise(DirectiveBase):
    """Exact value, converted to the attribute's type."""

    kind: Literal["precise"] = "precise"
    value: Any


class ElementCount(DirectiveBase):
    """Container size plus optional strategies for its slots.

    ``element`` applies to sequences, sets and tuples; ``key`` / ``value``
    apply to mappings.
    """

    kind: Literal["element_count"] = "element_count"
    count: int | None = Field(default=None, ge=0)
    element: AttributeStrategy | None = None
    key: AttributeStrategy | None = None
    value: AttributeStrategy | None = None


class Exclude(DirectiveBase):
    """The attribute is skipped: no value is produced and no accessor is called."""

    kind: Literal["exclude"] = "exclude"


class UseStrategy(DirectiveBase):
    """The attribute value comes from ``strategy`` instead of being manufactured."""

    kind: Literal["use_strategy"] = "use_strategy"
    strategy: AttributeStrategy


Directive = Range | Precise | ElementCount | Exclude | UseStrategy


def find_directive(directives, directive_type):
    """Return the first directive of ``directive_type``, or None."""
    for directive in directives:
        if isinstance(directive, directive_type):
            return directive
    return None


# =============================================================================
# Constructor marker
# =============================================================================


def non_public(init: Callable) -> Callable:
    """Mark an ``__init__`` as non-public.

    The class is then treated as exposing no accessible constructor: its
    static factories are tried first and the constructor itself only as a
    last resort.
    """
    init.__fixtureforge_non_public__ = True
    return init


def is_non_public(func: Any) -> bool:
    return bool(getattr(func, "__fixtureforge_non_public__", False))
