"""Models for fixtureforge, organized by concern.

- directives.py: Annotated customization directives and override strategies
- scalars.py: fixed-width scalar types
- types.py: resolved type references, attribute descriptors, construction
  candidates and the depth ledger
"""

from .directives import (
    AttributeStrategy,
    ConstantStrategy,
    CallableStrategy,
    DirectiveBase,
    Range,
    Precise,
    ElementCount,
    Exclude,
    UseStrategy,
    Directive,
    find_directive,
    non_public,
    is_non_public,
)
from .scalars import Byte, Short, Long, Char, Float32, FIXED_WIDTH_TYPES
from .types import (
    TypeReference,
    AttributeDescriptor,
    ConstructionCandidate,
    DepthLedger,
)

__all__ = [
    # Directives
    "AttributeStrategy",
    "ConstantStrategy",
    "CallableStrategy",
    "DirectiveBase",
    "Range",
    "Precise",
    "ElementCount",
    "Exclude",
    "UseStrategy",
    "Directive",
    "find_directive",
    "non_public",
    "is_non_public",
    # Scalars
    "Byte",
    "Short",
    "Long",
    "Char",
    "Float32",
    "FIXED_WIDTH_TYPES",
    # Runtime types
    "TypeReference",
    "AttributeDescriptor",
    "ConstructionCandidate",
    "DepthLedger",
]
