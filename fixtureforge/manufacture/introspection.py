"""Attribute discovery.

The engine does not inspect classes itself; it asks a ClassIntrospector for
the attributes to populate and for auxiliary methods to call afterwards.
ConventionIntrospector covers plain classes, dataclasses, pydantic models
and NamedTuples:

- public class-level annotations (ClassVar / InitVar excluded)
- properties, writable when they have a setter
- frozen dataclasses, frozen pydantic models and NamedTuples expose their
  fields read-only
"""

import dataclasses
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Iterable, Mapping, Sequence, get_origin, get_type_hints

from ..core.models.types import AttributeDescriptor
from .resolver import extract_directives

logger = logging.getLogger(__name__)

# Classes from these packages contribute no attributes (BaseModel internals,
# abc machinery, builtin containers)
_LIBRARY_PACKAGES = frozenset({"builtins", "abc", "typing", "collections", "enum", "pydantic"})


def type_hints(obj: Any) -> dict[str, Any]:
    """``get_type_hints`` with ``Annotated`` kept; raw annotations on failure."""
    target = getattr(obj, "__func__", obj)
    try:
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError, AttributeError) as e:
        logger.warning(
            "Cannot resolve type hints of %s: %s",
            getattr(target, "__qualname__", target),
            e,
        )
        try:
            return dict(inspect.get_annotations(target))
        except TypeError:
            return {}


def is_frozen(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return True
    model_config = getattr(cls, "model_config", None)
    if isinstance(model_config, dict) and model_config.get("frozen"):
        return True
    return issubclass(cls, tuple)


def _is_library_class(klass: type) -> bool:
    return klass.__module__.split(".")[0] in _LIBRARY_PACKAGES


def _field_getter(name: str) -> Callable[[Any], Any]:
    def getter(instance: Any) -> Any:
        return getattr(instance, name, None)

    return getter


def _field_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return setter


# =============================================================================
# Introspector interface
# =============================================================================


class ClassIntrospector(ABC):
    """Discovers what the Graph Populator should touch on a class."""

    @abstractmethod
    def attributes(self, cls: type) -> list[AttributeDescriptor]:
        """Attributes of ``cls``, most-derived class first, declaration order."""

    @abstractmethod
    def extra_methods(self, cls: type) -> list[str]:
        """Names of methods to invoke after the attributes are populated."""


class ConventionIntrospector(ClassIntrospector):
    """Introspector driven by annotations and properties.

    Args:
        extra_methods: Class -> method names to call after population.
            Applies to subclasses too.
        excluded_attributes: Class -> attribute names never populated.
            Applies to subclasses too.
    """

    def __init__(
        self,
        extra_methods: Mapping[type, Sequence[str]] | None = None,
        excluded_attributes: Mapping[type, Iterable[str]] | None = None,
    ) -> None:
        self._extra_methods = {k: list(v) for k, v in (extra_methods or {}).items()}
        self._excluded = {k: set(v) for k, v in (excluded_attributes or {}).items()}

    def attributes(self, cls: type) -> list[AttributeDescriptor]:
        frozen = is_frozen(cls)
        excluded = self._excluded_for(cls)
        seen: set[str] = set()
        found: list[AttributeDescriptor] = []

        for klass in cls.__mro__:
            if _is_library_class(klass):
                continue
            own = inspect.get_annotations(klass)
            hints = type_hints(klass) if own else {}

            for name in own:
                if name in seen or name.startswith("_") or name in excluded:
                    continue
                hint = hints.get(name, own[name])
                if hint is ClassVar or get_origin(hint) is ClassVar:
                    continue
                if isinstance(hint, dataclasses.InitVar):
                    continue
                seen.add(name)
                found.append(
                    AttributeDescriptor(
                        name=name,
                        type_hint=hint,
                        directives=extract_directives(hint),
                        getter=_field_getter(name),
                        setter=None if frozen else _field_setter(name),
                        declaring_class=klass,
                    )
                )

            for name, member in vars(klass).items():
                if not isinstance(member, property) or member.fget is None:
                    continue
                if name in seen or name.startswith("_") or name in excluded:
                    continue
                seen.add(name)
                hint = type_hints(member.fget).get("return", Any)
                found.append(
                    AttributeDescriptor(
                        name=name,
                        type_hint=hint,
                        directives=extract_directives(hint),
                        getter=member.fget,
                        setter=member.fset,
                        declaring_class=klass,
                    )
                )

        return found

    def extra_methods(self, cls: type) -> list[str]:
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            for name in self._extra_methods.get(klass, ()):
                if name not in names:
                    names.append(name)
        return names

    def _excluded_for(self, cls: type) -> set[str]:
        excluded: set[str] = set()
        for klass in cls.__mro__:
            excluded |= self._excluded.get(klass, set())
        return excluded
