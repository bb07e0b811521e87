"""External production fallback.

Consulted when the engine cannot build a value itself: an interface with no
concrete substitute, an abstract class nobody can instantiate, a concrete
class whose construction candidates all failed, or a class whose depth
limit was reached. Whatever it returns is used verbatim.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Sequence

from ..core.models.types import TypeReference

logger = logging.getLogger(__name__)


class ExternalProductionFallback(ABC):
    @abstractmethod
    def manufacture(self, cls: Any, type_args: Sequence[TypeReference]) -> Any:
        """Return a value for ``cls`` or None."""


class NullFallback(ExternalProductionFallback):
    """Produces nothing; the attribute is left untouched."""

    def manufacture(self, cls: Any, type_args: Sequence[TypeReference]) -> Any:
        return None


class RegistryFallback(ExternalProductionFallback):
    """Looks the class up in a registry of instances or zero-argument factories.

    Example:
        RegistryFallback({Clock: FrozenClock, Repository: lambda: InMemoryRepo()})
    """

    def __init__(self, registry: Mapping[Any, Any | Callable[[], Any]]) -> None:
        self._registry = dict(registry)

    def manufacture(self, cls: Any, type_args: Sequence[TypeReference]) -> Any:
        if cls not in self._registry:
            logger.debug("No registry entry for %s", getattr(cls, "__qualname__", cls))
            return None
        entry = self._registry[cls]
        return entry() if callable(entry) else entry
