"""fixtureforge: fully populated test fixtures for arbitrary Python types."""

__version__ = "0.1.0"

from .config import FixtureConfig
from .core.models import (
    AttributeStrategy,
    Byte,
    CallableStrategy,
    Char,
    ConstantStrategy,
    ElementCount,
    Exclude,
    Float32,
    Long,
    Precise,
    Range,
    Short,
    UseStrategy,
    non_public,
)
from .core.providers import RandomValueProvider, ValueProvider
from .manufacture import (
    ConfigurationError,
    ExternalProductionFallback,
    FixtureFactory,
    ManufactureError,
    NullFallback,
    RegistryFallback,
)

__all__ = [
    "__version__",
    "FixtureConfig",
    "FixtureFactory",
    "ValueProvider",
    "RandomValueProvider",
    "ExternalProductionFallback",
    "NullFallback",
    "RegistryFallback",
    "ManufactureError",
    "ConfigurationError",
    # Directives
    "Range",
    "Precise",
    "ElementCount",
    "Exclude",
    "UseStrategy",
    "AttributeStrategy",
    "ConstantStrategy",
    "CallableStrategy",
    "non_public",
    # Scalars
    "Byte",
    "Short",
    "Long",
    "Char",
    "Float32",
]
