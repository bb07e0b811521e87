"""Recursive manufacturing engine for fixtureforge.

Builds fully populated instance graphs for arbitrary types: resolves
generic type parameters across inheritance, picks a construction path,
populates attributes recursively (read-only nested objects included) and
fills containers to a target size.

Usage:
    from fixtureforge.manufacture import FixtureFactory

    factory = FixtureFactory()
    order = factory.manufacture(Order)

Key Concepts:
    - Depth ledger: bounds how often a class may nest in one graph
    - Memoization: optionally reuses one instance per type
    - Fallback: supplies values for types the engine cannot build
"""

from .builder import InstanceBuilder
from .containers import ContainerFiller
from .errors import ConfigurationError, ManufactureError
from .fallback import ExternalProductionFallback, NullFallback, RegistryFallback
from .introspection import ClassIntrospector, ConventionIntrospector
from .orchestrator import FixtureFactory, TypeCategory, categorize
from .populator import GraphPopulator
from .resolver import SubstitutionMap, container_arguments, resolve_type

__all__ = [
    # Entry point
    "FixtureFactory",
    "TypeCategory",
    "categorize",
    # Components
    "InstanceBuilder",
    "ContainerFiller",
    "GraphPopulator",
    "SubstitutionMap",
    "resolve_type",
    "container_arguments",
    # Collaborators
    "ClassIntrospector",
    "ConventionIntrospector",
    "ExternalProductionFallback",
    "NullFallback",
    "RegistryFallback",
    # Errors
    "ManufactureError",
    "ConfigurationError",
]
