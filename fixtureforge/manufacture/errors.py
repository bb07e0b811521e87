"""Fatal errors raised by the manufacturing engine.

Recoverable conditions (a failed construction attempt, a depth limit, an
immutable container) are never raised; they are logged and the engine
carries on with a partially populated graph.
"""


class ManufactureError(Exception):
    """A top-level manufacture call failed. The root cause is chained."""


class ConfigurationError(ManufactureError):
    """The request or its directives cannot be satisfied.

    Raised for missing generic type arguments, override-strategy values
    incompatible with their target, unsupported scalar categories and
    precise values that cannot be converted.
    """
