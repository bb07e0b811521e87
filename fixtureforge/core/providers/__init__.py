"""Value providers for fixtureforge.

A provider supplies scalar values and the policies the manufacturing engine
consults (element counts, max depth, memoization, concrete substitutes,
construction-candidate ordering, excluded directives).
"""

from .base import ValueProvider
from .random_data import RandomValueProvider

__all__ = ["ValueProvider", "RandomValueProvider"]
