"""Type resolution: typing hints to concrete classes.

Hints are resolved against a SubstitutionMap that binds type-parameter
names to type references. The map for a class is built from the type
arguments supplied at its use-site, then from the concrete arguments its
ancestors were declared with:

    class Box(Generic[T]):
        item: T

    class IntBox(Box[int]):      # T -> int, bound from __orig_bases__
        ...

    SubstitutionMap.for_class(Box, [str])   # T -> str
    SubstitutionMap.for_class(IntBox)       # T -> int

Resolution never fails: anything that cannot be resolved becomes ``object``
and a warning is logged.
"""

import collections.abc
import logging
import types
import typing
from dataclasses import replace
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Generic,
    Literal,
    Protocol,
    Sequence,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from ..core.models.types import TypeReference
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

NONE_TYPE = type(None)
OBJECT_REF = TypeReference(object)

_TYPE_ALIAS_TYPE = getattr(typing, "TypeAliasType", None)


def declared_parameters(cls: Any) -> tuple[TypeVar, ...]:
    """Type parameters declared by a generic class, in order."""
    return tuple(
        p for p in getattr(cls, "__parameters__", ()) if isinstance(p, TypeVar)
    )


def extract_directives(hint: Any) -> tuple[Any, ...]:
    """Metadata of an ``Annotated`` hint, empty for anything else."""
    if get_origin(hint) is Annotated:
        return tuple(get_args(hint)[1:])
    return ()


def contains_type_var(hint: Any) -> bool:
    if isinstance(hint, TypeVar):
        return True
    return any(contains_type_var(arg) for arg in get_args(hint))


# =============================================================================
# Substitution map
# =============================================================================


class SubstitutionMap:
    """Type-parameter name -> bound type, for one class in one call.

    A binding is either a resolved TypeReference or a raw hint still
    mentioning other type parameters; raw hints are resolved on first
    lookup. ``extra`` holds supplied arguments beyond the class's arity.
    """

    def __init__(
        self,
        bindings: dict[str, Any] | None = None,
        extra: Sequence[TypeReference] = (),
    ) -> None:
        self.bindings: dict[str, Any] = dict(bindings or {})
        self.extra: tuple[TypeReference, ...] = tuple(extra)

    @classmethod
    def for_class(
        cls, target: Any, type_args: Sequence[Any] = ()
    ) -> "SubstitutionMap":
        """Build the map for ``target`` given its use-site type arguments.

        Raises:
            ConfigurationError: ``target`` declares more type parameters
                than arguments were supplied.
        """
        args = [
            a if isinstance(a, TypeReference) else resolve_type(a) for a in type_args
        ]
        params = declared_parameters(target)
        if len(params) > len(args):
            expected = ", ".join(p.__name__ for p in params)
            raise ConfigurationError(
                f"{getattr(target, '__qualname__', target)} is missing generic type "
                f"arguments, expected [{expected}] found {args}"
            )
        substitutions = cls(
            {p.__name__: arg for p, arg in zip(params, args)},
            extra=args[len(params) :],
        )
        substitutions._bind_ancestors(target)
        return substitutions

    def _bind_ancestors(self, target: Any) -> None:
        for klass in getattr(target, "__mro__", ()):
            for base in klass.__dict__.get("__orig_bases__", ()):
                origin = get_origin(base)
                if origin is None or origin is Generic or origin is Protocol:
                    continue
                for param, arg in zip(declared_parameters(origin), get_args(base)):
                    name = param.__name__
                    if name in self.bindings:
                        continue
                    if isinstance(arg, TypeVar) and arg.__name__ == name:
                        continue
                    if contains_type_var(arg):
                        self.bindings[name] = arg
                    else:
                        self.bindings[name] = resolve_type(arg)

    def lookup(self, name: str, _seen: frozenset[str] = frozenset()) -> TypeReference | None:
        bound = self.bindings.get(name)
        if bound is None or isinstance(bound, TypeReference):
            return bound
        resolved = resolve_type(bound, self, _seen | {name})
        self.bindings[name] = resolved
        return resolved

    def __bool__(self) -> bool:
        return bool(self.bindings) or bool(self.extra)

    def __repr__(self) -> str:
        return f"SubstitutionMap({self.bindings!r}, extra={list(self.extra)!r})"


# =============================================================================
# Resolution
# =============================================================================


def resolve_type(
    hint: Any,
    substitutions: SubstitutionMap | None = None,
    _seen: frozenset[str] = frozenset(),
) -> TypeReference:
    """Resolve ``hint`` into a TypeReference.

    - ``Annotated[T, ...]``: T, with the metadata attached as directives
    - ``TypeVar``: its binding; unbound -> declared bound, else object
    - ``Union`` / ``Optional``: first non-None member
    - ``X[A, B]``: X with A and B resolved recursively
    - ``NewType`` / type aliases: the underlying type
    """
    if hint is None or hint is NONE_TYPE:
        return TypeReference(NONE_TYPE)
    if hint is Any:
        return OBJECT_REF
    if isinstance(hint, TypeVar):
        return _resolve_type_var(hint, substitutions, _seen)
    if isinstance(hint, (str, ForwardRef)):
        logger.warning("Unresolved forward reference %r. Will use object instead", hint)
        return OBJECT_REF
    if _TYPE_ALIAS_TYPE is not None and isinstance(hint, _TYPE_ALIAS_TYPE):
        return resolve_type(hint.__value__, substitutions, _seen)
    supertype = getattr(hint, "__supertype__", None)
    if supertype is not None:
        return resolve_type(supertype, substitutions, _seen)

    origin = get_origin(hint)
    if origin is Annotated:
        inner, *metadata = get_args(hint)
        ref = resolve_type(inner, substitutions, _seen)
        return replace(ref, directives=tuple(metadata) + ref.directives)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(hint) if a is not NONE_TYPE]
        if not members:
            return TypeReference(NONE_TYPE)
        if len(members) > 1:
            logger.debug("Union %s resolved to its first member %s", hint, members[0])
        return resolve_type(members[0], substitutions, _seen)
    if origin is Literal:
        return TypeReference(Literal, values=get_args(hint))
    if origin is collections.abc.Callable:
        return TypeReference(origin)
    if origin is not None:
        raw_args = get_args(hint)
        variadic = False
        if origin is tuple and (not raw_args or raw_args[-1] is Ellipsis):
            raw_args = raw_args[:-1]
            variadic = True
        args = tuple(resolve_type(a, substitutions, _seen) for a in raw_args)
        return TypeReference(origin, args, variadic=variadic)
    if isinstance(hint, type):
        return TypeReference(hint, variadic=hint is tuple)

    logger.warning("Unrecognized type %r. Will use object instead", hint)
    return OBJECT_REF


def _resolve_type_var(
    type_var: TypeVar,
    substitutions: SubstitutionMap | None,
    seen: frozenset[str],
) -> TypeReference:
    name = type_var.__name__
    if substitutions is not None and name not in seen:
        bound = substitutions.lookup(name, seen)
        if bound is not None:
            return bound

    fallback = type_var.__bound__
    if fallback is None and type_var.__constraints__:
        fallback = type_var.__constraints__[0]
    if fallback is not None and not isinstance(fallback, (str, ForwardRef)):
        logger.warning(
            "Type variable %s is unbound. Will use its bound %s instead", name, fallback
        )
        return resolve_type(fallback, substitutions, seen | {name})

    logger.warning("Type variable %s is unbound. Will use object instead", name)
    return OBJECT_REF


# =============================================================================
# Helpers for containers and nested generics
# =============================================================================


def pad_type_arguments(
    cls: Any, args: Sequence[TypeReference]
) -> tuple[TypeReference, ...]:
    """Append ``object`` for every declared parameter of ``cls`` left unbound."""
    missing = len(declared_parameters(cls)) - len(args)
    if missing <= 0:
        return tuple(args)
    logger.warning(
        "Missing type parameters for %s, appended object x%d",
        getattr(cls, "__qualname__", cls),
        missing,
    )
    return tuple(args) + (OBJECT_REF,) * missing


def container_arguments(
    cls: type,
    substitutions: SubstitutionMap | None,
    abc: type,
    arity: int,
) -> tuple[TypeReference, ...]:
    """Element (or key and value) types of a container class.

    Looks for a parameterized base such as ``list[str]`` or
    ``dict[str, int]`` in the class hierarchy, then for surplus type
    arguments supplied at the use-site, and finally assumes ``object``.
    """
    for klass in getattr(cls, "__mro__", (cls,)):
        for base in klass.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if isinstance(origin, type) and issubclass(origin, abc) and get_args(base):
                args = tuple(resolve_type(a, substitutions) for a in get_args(base))
                return _fit(args, arity)
    if substitutions is not None and substitutions.extra:
        return _fit(substitutions.extra, arity)
    logger.warning(
        "Container %s doesn't have generic types, will use object instead",
        getattr(cls, "__qualname__", cls),
    )
    return (OBJECT_REF,) * arity


def _fit(args: Sequence[TypeReference], arity: int) -> tuple[TypeReference, ...]:
    args = tuple(args[:arity])
    return args + (OBJECT_REF,) * (arity - len(args))
