"""CLI helpers: exit codes, target import and plain-data rendering."""

import builtins
import dataclasses
import importlib
from collections.abc import Mapping
from enum import Enum
from typing import Any

from ..manufacture.introspection import ConventionIntrospector


class ExitCode:
    """Standardized exit codes for CLI commands.

        0 = Success
        1 = Manufacture or configuration error
        2 = Target (or type argument) not importable
    """

    SUCCESS = 0
    MANUFACTURE_ERROR = 1
    NOT_IMPORTABLE = 2


class TargetImportError(Exception):
    """A ``module:QualName`` reference could not be imported."""


def load_target(reference: str) -> Any:
    """Import ``module:QualName``. A bare name is looked up in builtins.

    Raises:
        TargetImportError: The module or attribute does not exist.
    """
    if ":" not in reference:
        if hasattr(builtins, reference):
            return getattr(builtins, reference)
        raise TargetImportError(
            f"Invalid target {reference!r}: expected module:QualName"
        )

    module_name, _, qualname = reference.partition(":")
    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetImportError(f"Cannot import module {module_name!r}: {e}") from e

    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise TargetImportError(
                f"Module {module_name!r} has no attribute {qualname!r}"
            ) from e
    return target


# =============================================================================
# Rendering
# =============================================================================

_introspector = ConventionIntrospector()


def to_plain(value: Any, _path: frozenset[int] = frozenset()) -> Any:
    """Convert a manufactured graph into JSON-compatible data.

    Objects become dicts with a ``__type__`` key. An object already being
    rendered further up the same path becomes ``"<cycle: ClassName>"``.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, complex):
        return str(value)
    if isinstance(value, type):
        return value.__qualname__

    if id(value) in _path:
        return f"<cycle: {type(value).__qualname__}>"
    path = _path | {id(value)}

    if isinstance(value, Mapping):
        return {str(k): to_plain(v, path) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)) and not hasattr(value, "_fields"):
        return [to_plain(v, path) for v in value]
    return _object_to_plain(value, path)


def _object_to_plain(value: Any, path: frozenset[int]) -> Any:
    data: dict[str, Any] = {"__type__": type(value).__qualname__}
    if dataclasses.is_dataclass(value) or hasattr(value, "_fields"):
        if dataclasses.is_dataclass(value):
            names = [f.name for f in dataclasses.fields(value)]
        else:
            names = list(value._fields)
        for name in names:
            data[name] = to_plain(getattr(value, name, None), path)
        return data

    attributes = _introspector.attributes(type(value))
    if not attributes and hasattr(value, "__iter__"):
        return [to_plain(v, path) for v in value]
    for attribute in attributes:
        try:
            data[attribute.name] = to_plain(attribute.getter(value), path)
        except Exception as e:
            data[attribute.name] = f"<error: {e}>"
    return data
