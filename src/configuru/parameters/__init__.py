"""Parameter system for configuru.

This module provides the declaration side of the framework: constraint
sets, parameter specifications and the per-type registry that turns them
into getter/setter pairs.
"""

from .constraints import (
    MISSING,
    Coercion,
    Constraints,
    ConstraintBuilder,
    coerce,
)
from .types import ParameterSpec
from .registry import Accessor, ParameterRegistry

__all__ = [
    # Constraints
    "MISSING",
    "Coercion",
    "Constraints",
    "ConstraintBuilder",
    "coerce",
    # Specs
    "ParameterSpec",
    # Registry
    "Accessor",
    "ParameterRegistry",
]
