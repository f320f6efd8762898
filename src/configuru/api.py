"""Public API for configuru.

This module collects the declaration API, the configuration engine, the
Configurable base class, source loading and the error hierarchy.
"""

# Parameters
from .parameters import (
    MISSING,
    Coercion,
    Constraints,
    ConstraintBuilder,
    ParameterSpec,
    ParameterRegistry,
    Accessor,
)

# Engine
from .configuration import Configuration
from .configurable import Configurable

# Sources
from .sources import resolve_source
from .loader import load_path, load_stream

# Errors
from .errors import (
    ConfigurationError,
    LockedError,
    NullNotAllowedError,
    EmptyNotAllowedError,
    TypeConstraintError,
    CapabilityMissingError,
    CoercionError,
    RangeError,
    UnknownParameterError,
    UnsupportedSourceError,
    SourceDecodeError,
    SourceNotFoundError,
    HostMissingError,
    RegistrySealedError,
    ConfigurationScopeError,
)

# Constants
from .constants import OPTIONS_SOURCE_KEY

# Version
try:
    from importlib.metadata import version
    __version__ = version("configuru")
except Exception:
    __version__ = "0.1.0"

__all__ = [
    # Parameters
    "MISSING",
    "Coercion",
    "Constraints",
    "ConstraintBuilder",
    "ParameterSpec",
    "ParameterRegistry",
    "Accessor",

    # Engine
    "Configuration",
    "Configurable",

    # Sources
    "resolve_source",
    "load_path",
    "load_stream",

    # Errors
    "ConfigurationError",
    "LockedError",
    "NullNotAllowedError",
    "EmptyNotAllowedError",
    "TypeConstraintError",
    "CapabilityMissingError",
    "CoercionError",
    "RangeError",
    "UnknownParameterError",
    "UnsupportedSourceError",
    "SourceDecodeError",
    "SourceNotFoundError",
    "HostMissingError",
    "RegistrySealedError",
    "ConfigurationScopeError",

    # Constants
    "OPTIONS_SOURCE_KEY",

    # Version
    "__version__",
]
