"""Runtime data model of the manufacturing engine.

These are plain dataclasses (not Pydantic models) because they hold live
classes, callables and instances rather than serializable data.
"""

import inspect
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Literal


@dataclass(frozen=True)
class TypeReference:
    """A resolved type: concrete class plus resolved type arguments.

    ``cls`` is ``typing.Literal`` for literal hints, in which case ``values``
    holds the allowed values. ``variadic`` marks ``tuple[X, ...]``.
    ``directives`` carries metadata found in ``Annotated`` wrappers.
    """

    cls: Any
    args: tuple["TypeReference", ...] = ()
    directives: tuple[Any, ...] = ()
    values: tuple[Any, ...] = ()
    variadic: bool = False

    @property
    def name(self) -> str:
        return getattr(self.cls, "__qualname__", repr(self.cls))

    def arg(self, index: int) -> "TypeReference":
        """Type argument at ``index``, or ``object`` when absent."""
        if index < len(self.args):
            return self.args[index]
        return TypeReference(object)

    def memo_key(self) -> Any:
        return (self.cls, tuple(a.memo_key() for a in self.args), self.values)

    def __repr__(self) -> str:
        if self.values:
            return f"Literal{list(self.values)!r}"
        if not self.args:
            return self.name
        inner = ", ".join(repr(a) for a in self.args)
        if self.variadic:
            inner += ", ..."
        return f"{self.name}[{inner}]"


@dataclass
class AttributeDescriptor:
    """An attribute discovered on a class.

    ``getter`` takes the instance; ``setter`` takes the instance and the value.
    Either may be None.
    """

    name: str
    type_hint: Any
    directives: tuple[Any, ...] = ()
    getter: Callable[..., Any] | None = None
    setter: Callable[[Any, Any], None] | None = None
    declaring_class: type | None = None

    @property
    def writable(self) -> bool:
        return self.setter is not None

    @property
    def read_only(self) -> bool:
        return self.setter is None and self.getter is not None


@dataclass
class ConstructionCandidate:
    """A constructor or static factory able to build the target class."""

    name: str
    target: Callable[..., Any]
    parameters: list[inspect.Parameter] = field(default_factory=list)
    hints: dict[str, Any] = field(default_factory=dict)
    kind: Literal["constructor", "factory", "non_public"] = "constructor"

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    def __repr__(self) -> str:
        params = ", ".join(p.name for p in self.parameters)
        return f"<{self.kind} {self.name}({params})>"


class DepthLedger:
    """Per-call record of how many times each class has been entered."""

    def __init__(self) -> None:
        self._depths: dict[Any, int] = {}

    def depth(self, cls: Any) -> int:
        return self._depths.get(cls, 0)

    @contextmanager
    def descend(self, cls: Any) -> Iterator[int]:
        previous = self._depths.get(cls, 0)
        self._depths[cls] = previous + 1
        try:
            yield previous + 1
        finally:
            if previous:
                self._depths[cls] = previous
            else:
                del self._depths[cls]

    def __repr__(self) -> str:
        entries = ", ".join(
            f"{getattr(k, '__qualname__', k)}={v}" for k, v in self._depths.items()
        )
        return f"DepthLedger({entries})"
