"""Instance construction.

Picks a construction path for a class and invokes it with manufactured
arguments. Candidates are tried in order; a candidate that raises is logged
at debug level and the next one is tried. Only ConfigurationError escapes.

Order:
1. Abstract classes and classes whose ``__init__`` is marked ``@non_public``:
   public static/class factories returning the class, then the non-public
   candidates (``_``-prefixed factories, the marked ``__init__``).
2. Everything else: the constructor, then the public factories.
"""

import inspect
import logging
import typing
from typing import TYPE_CHECKING, Any, Callable, Sequence, get_origin

from ..core.models.directives import find_directive, is_non_public
from ..core.models.types import ConstructionCandidate, DepthLedger
from .errors import ConfigurationError
from .introspection import type_hints
from .resolver import SubstitutionMap, extract_directives

if TYPE_CHECKING:
    from .orchestrator import FixtureFactory

logger = logging.getLogger(__name__)

_SELF = getattr(typing, "Self", None)
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


# =============================================================================
# Signatures
# =============================================================================


def _signature(func: Callable) -> inspect.Signature | None:
    try:
        return inspect.signature(func, eval_str=True)
    except NameError:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None


def signature_parameters(
    func: Callable, extra_hints: dict[str, Any] | None = None
) -> tuple[list[inspect.Parameter], dict[str, Any]]:
    """Parameters worth manufacturing, and their hints.

    Var-args are dropped, as are unannotated parameters that have a default.
    ``extra_hints`` take precedence over the signature's annotations.
    """
    signature = _signature(func)
    if signature is None:
        return [], {}
    extra_hints = extra_hints or {}
    parameters: list[inspect.Parameter] = []
    hints: dict[str, Any] = {}
    for param in signature.parameters.values():
        if param.kind in _VARIADIC:
            continue
        if param.name in extra_hints:
            hint = extra_hints[param.name]
        elif param.annotation is not inspect.Parameter.empty:
            hint = param.annotation
        elif param.default is not inspect.Parameter.empty:
            continue
        else:
            hint = object
        parameters.append(param)
        hints[param.name] = hint
    return parameters, hints


def _returns_class(func: Callable, cls: type) -> bool:
    returned = type_hints(func).get("return")
    if returned is None:
        return False
    if isinstance(returned, str):
        return returned in (cls.__name__, cls.__qualname__)
    if get_origin(returned) is typing.Annotated:
        returned = returned.__origin__
    return returned is cls or returned is _SELF or get_origin(returned) is cls


# =============================================================================
# Builder
# =============================================================================


class InstanceBuilder:
    """Selects and invokes a construction path for a class."""

    def __init__(self, factory: "FixtureFactory") -> None:
        self._factory = factory

    def constructor(self, cls: type) -> ConstructionCandidate | None:
        if inspect.isabstract(cls):
            return None
        # Class-level hints keep Annotated directives that generated
        # __init__ signatures (dataclasses, pydantic) may have dropped
        parameters, hints = signature_parameters(cls, type_hints(cls))
        kind = "non_public" if is_non_public(getattr(cls, "__init__", None)) else "constructor"
        return ConstructionCandidate(
            name=cls.__qualname__,
            target=cls,
            parameters=parameters,
            hints=hints,
            kind=kind,
        )

    def factories(self, cls: type) -> list[ConstructionCandidate]:
        """Static and class methods declared on ``cls`` that return ``cls``."""
        candidates = []
        for name, member in vars(cls).items():
            if not isinstance(member, (staticmethod, classmethod)):
                continue
            if name.startswith("__") or not _returns_class(member.__func__, cls):
                continue
            func = getattr(cls, name)
            parameters, hints = signature_parameters(func)
            candidates.append(
                ConstructionCandidate(
                    name=f"{cls.__qualname__}.{name}",
                    target=func,
                    parameters=parameters,
                    hints=hints,
                    kind="non_public" if name.startswith("_") else "factory",
                )
            )
        return candidates

    def build(
        self,
        cls: type,
        ledger: DepthLedger,
        type_args: Sequence[Any] = (),
        substitutions: SubstitutionMap | None = None,
    ) -> Any | None:
        """Build an instance of ``cls``, or return None when every candidate failed."""
        if substitutions is None:
            substitutions = SubstitutionMap.for_class(cls, type_args)
        provider = self._factory.provider

        every_factory = self.factories(cls)
        public = [c for c in every_factory if c.kind == "factory"]
        hidden = [c for c in every_factory if c.kind == "non_public"]
        constructor = self.constructor(cls)

        if constructor is None or constructor.kind == "non_public":
            provider.sort_factories(public)
            instance = self._attempt(cls, public, ledger, substitutions)
            if instance is not None:
                return instance
            if constructor is not None:
                hidden.append(constructor)
            provider.sort_constructors(hidden)
            return self._attempt(cls, hidden, ledger, substitutions)

        constructors = [constructor]
        provider.sort_constructors(constructors)
        instance = self._attempt(cls, constructors, ledger, substitutions)
        if instance is None and public:
            provider.sort_factories(public)
            instance = self._attempt(cls, public, ledger, substitutions)
        return instance

    def _attempt(
        self,
        cls: type,
        candidates: list[ConstructionCandidate],
        ledger: DepthLedger,
        substitutions: SubstitutionMap,
    ) -> Any | None:
        for candidate in candidates:
            try:
                args, kwargs = manufacture_arguments(
                    self._factory, candidate.parameters, candidate.hints, ledger, substitutions
                )
                instance = candidate.target(*args, **kwargs)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.debug("Couldn't create %s with %r: %s", cls.__qualname__, candidate, e)
                continue
            if instance is not None:
                logger.debug("Created %s with %r", cls.__qualname__, candidate)
                return instance
        return None


def manufacture_arguments(
    factory: "FixtureFactory",
    parameters: list[inspect.Parameter],
    hints: dict[str, Any],
    ledger: DepthLedger,
    substitutions: SubstitutionMap | None,
) -> tuple[list[Any], dict[str, Any]]:
    """Manufacture call arguments for ``parameters``.

    Positional-only parameters are passed positionally, the rest by keyword.
    An excluded parameter is omitted when it has a default and passed as
    None otherwise.
    """
    excluded = tuple(factory.provider.excluded_directive_kinds())
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for param in parameters:
        hint = hints.get(param.name, object)
        if excluded and find_directive(extract_directives(hint), excluded) is not None:
            if param.default is not inspect.Parameter.empty:
                continue
            value = None
        else:
            value = factory.manufacture_value(hint, ledger, substitutions=substitutions)
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[param.name] = value
    return args, kwargs
