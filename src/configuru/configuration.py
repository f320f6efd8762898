"""Configuration engine.

A Configuration holds the parameter values of one configured object. It
reads and writes them through the accessors of a ParameterRegistry, and
applies whole sources in bulk with configure_from().

Key behaviors:
- Values are sparse: an unset parameter without a default reads as None
- lock()/unlock() flip a flag that only ``lockable`` parameters consult
- A failing write leaves the previously stored value untouched
- Bulk application is not atomic: entries applied before a failure stay
  applied, and flat mappings are applied in their iteration order
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional
import logging
import weakref

from .constants import OPTIONS_SOURCE_KEY, RESERVED_NAMES
from .errors import UnknownParameterError
from .parameters import ParameterRegistry
from .sources import is_source_sequence, resolve_source

logger = logging.getLogger(__name__)


class Configuration:
    """Parameter values for one configured object.

    Parameters are available both through get()/set() and as attributes:

        >>> registry = ParameterRegistry()
        >>> registry.declare("retries", default=3, make_int=True, min=0)
        >>> config = Configuration(registry)
        >>> config.retries
        3
        >>> config.retries = "5"
        >>> config.get("retries")
        5

    Args:
        registry: Declared parameters; sealed by this constructor
        host: Optional object whose methods string ``convert`` rules call.
            It is held by weak reference when possible.
    """

    def __init__(self, registry: ParameterRegistry, host: Any = None):
        if not isinstance(registry, ParameterRegistry):
            raise TypeError(
                f"Configuration requires a ParameterRegistry, got {type(registry).__name__}"
            )
        object.__setattr__(self, "_registry", registry)
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_locked", False)
        object.__setattr__(self, "_host_ref", None)
        registry.seal()
        if host is not None:
            self.bind(host)

    # ------------------------------------------------------------------
    # Host and lock state
    # ------------------------------------------------------------------

    def bind(self, host: Any) -> None:
        """Bind the object that string ``convert`` rules are invoked on."""
        try:
            ref = weakref.ref(host)
        except TypeError:
            # Hosts without weakref support (e.g. __slots__ classes) are held strongly
            def ref(host=host):
                return host
        object.__setattr__(self, "_host_ref", ref)

    @property
    def host(self) -> Any:
        """The bound host, or None if unbound or already collected."""
        return self._host_ref() if self._host_ref is not None else None

    @property
    def registry(self) -> ParameterRegistry:
        return self._registry

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self, flag: bool = True) -> None:
        """Set the lock flag. Stored values are not re-validated."""
        object.__setattr__(self, "_locked", bool(flag))
        logger.debug(f"Configuration for {self._registry.name or '<anonymous>'} locked={bool(flag)}")

    def unlock(self) -> None:
        self.lock(False)

    # ------------------------------------------------------------------
    # Single-parameter access
    # ------------------------------------------------------------------

    def get(self, name: str) -> Any:
        """Get a parameter value.

        Returns:
            The stored value, the materialized default, or None

        Raises:
            UnknownParameterError: If the parameter was never declared
        """
        return self._registry.accessor(name).getter(self)

    def set(self, name: str, value: Any, *, host: Any = None) -> Any:
        """Validate and store a parameter value.

        ``set("options_source", source)`` applies ``source`` as a nested
        source instead.

        Args:
            name: Parameter name
            value: Incoming value
            host: Overrides the bound host for string ``convert`` rules

        Returns:
            The stored value, after coercion and conversion

        Raises:
            UnknownParameterError: If the parameter was never declared
            ConfigurationError: If a constraint rejects the value
        """
        if name == OPTIONS_SOURCE_KEY:
            self._apply_source(value, host)
            return None
        return self._registry.accessor(name).setter(self, value, host)

    def param_names(self) -> List[str]:
        """Declared parameter names, in declaration order."""
        return self._registry.names()

    def as_dict(self) -> Dict[str, Any]:
        """Current value of every declared parameter (defaults included)."""
        return {name: self.get(name) for name in self._registry.names()}

    # ------------------------------------------------------------------
    # Bulk application
    # ------------------------------------------------------------------

    def configure_from(
        self,
        source: Any,
        on_finish: Optional[Callable[["Configuration"], Any]] = None,
        *,
        host: Any = None,
    ) -> "Configuration":
        """Apply a configuration source.

        Args:
            source: Mapping, list of sources, file path or readable stream
            on_finish: Called once with this configuration after everything
                is applied
            host: Overrides the bound host for string ``convert`` rules

        Returns:
            This configuration, for chaining

        Raises:
            UnsupportedSourceError: If a source has an unrecognized type
            SourceDecodeError: If a file or stream cannot be decoded
            UnknownParameterError: If a key names no declared parameter
            ConfigurationError: If a constraint rejects a value
        """
        self._apply_source(source, host)
        if on_finish is not None:
            on_finish(self)
        return self

    def configure(
        self,
        source: Any = None,
        on_finish: Optional[Callable[["Configuration"], Any]] = None,
        /,
        **options: Any,
    ) -> "Configuration":
        """Apply an optional source, then keyword options.

        Example:
            >>> config.configure("defaults.yaml", retries=10)
        """
        if source is not None:
            self._apply_source(source, None)
        if options:
            self._apply_mapping(options, None)
        if on_finish is not None:
            on_finish(self)
        return self

    def _apply_source(self, source: Any, host: Any) -> None:
        resolved = resolve_source(source)
        if is_source_sequence(resolved):
            logger.debug(f"Applying {len(resolved)} configuration sources in order")
            for element in resolved:
                self._apply_source(element, host)
        else:
            self._apply_mapping(resolved, host)

    def _apply_mapping(self, mapping: Mapping, host: Any) -> None:
        for key, value in mapping.items():
            if key == OPTIONS_SOURCE_KEY:
                logger.debug(f"Merging nested {OPTIONS_SOURCE_KEY}")
                self._apply_source(value, host)
                continue
            if not isinstance(key, str):
                raise UnknownParameterError(
                    f"Parameter names must be strings, got {type(key).__name__} {key!r}", None
                )
            logger.debug(f"Setting '{key}'")
            self._registry.accessor(key).setter(self, value, host)

    # ------------------------------------------------------------------
    # Attribute access for declared parameters
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        elif name in RESERVED_NAMES and name != OPTIONS_SOURCE_KEY:
            raise AttributeError(f"'{name}' is a read-only attribute of Configuration")
        else:
            self.set(name, value)

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._registry.names()))

    def __repr__(self) -> str:
        items = [f"{k}={v!r}" for k, v in self._values.items()]
        shown = ", ".join(items[:3]) + ("..." if len(items) > 3 else "")
        lock = ", locked" if self._locked else ""
        return f"Configuration({self._registry.name or '<anonymous>'}: {shown}{lock})"
