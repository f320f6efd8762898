"""Exception hierarchy for configuru.

Every failure raised by the framework derives from ConfigurationError so
callers can catch configuration problems as a group. Each concrete error
also derives from the builtin exception a Python caller would expect
(ValueError for bad values, TypeError for wrong types, AttributeError for
unknown names), so existing ``except ValueError`` handlers keep working.

Errors are raised at the point of failure and never recovered internally.
"""

from typing import Any, Optional


class ConfigurationError(Exception):
    """Base class for all configuru errors.

    Attributes:
        parameter: Name of the parameter involved, if any
    """

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class LockedError(ConfigurationError, RuntimeError):
    """A lockable parameter was written while the configuration is locked."""


class NullNotAllowedError(ConfigurationError, ValueError):
    """A ``not_nil`` parameter received None."""


class EmptyNotAllowedError(ConfigurationError, ValueError):
    """A ``not_empty`` parameter received None or an empty value."""


class TypeConstraintError(ConfigurationError, TypeError):
    """A value's type is not among the types allowed by ``must_be``.

    Also raised when a ``min``/``max`` bound cannot be compared with the
    value at all.
    """


class CapabilityMissingError(ConfigurationError, TypeError):
    """A value lacks an attribute required by ``must_respond_to``."""

    def __init__(self, message: str, parameter: Optional[str] = None,
                 capability: Optional[str] = None):
        super().__init__(message, parameter)
        self.capability = capability


class CoercionError(ConfigurationError, ValueError):
    """A ``make_*`` coercion cannot represent the incoming value."""


class RangeError(ConfigurationError, ValueError):
    """A value violates a ``max``, ``min`` or ``in`` constraint."""


class UnknownParameterError(ConfigurationError, AttributeError):
    """A parameter name was never declared on the registry."""


class UnsupportedSourceError(ConfigurationError, TypeError):
    """A configuration source is not a mapping, sequence, path or stream."""

    def __init__(self, source: Any):
        super().__init__(
            f"Unsupported configuration source type: {type(source).__name__}. "
            f"Expected a mapping, a list of sources, a file path or a readable stream"
        )
        self.source = source


class SourceDecodeError(ConfigurationError, ValueError):
    """A file or stream could not be decoded into a configuration source."""


class SourceNotFoundError(SourceDecodeError):
    """A configuration file does not exist."""


class HostMissingError(ConfigurationError, RuntimeError):
    """A ``convert`` constraint names a host method but no host is available."""


class RegistrySealedError(ConfigurationError, RuntimeError):
    """A parameter was declared after the registry was sealed."""


class ConfigurationScopeError(ConfigurationError, AttributeError):
    """Configuration was accessed at a level the Configurable scope forbids."""
