"""Per-type parameter registry.

The registry maps parameter names to their specifications, preserves
declaration order, and keeps a dispatch table of getter/setter closures
built once per declaration. Configurations look parameters up here; they
never carry their own copy of the rules.

A registry is sealed by the first Configuration built from it. After that
it is read-only, which makes "declare before instantiate" an enforced
rule instead of an import-order convention.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Tuple
import logging

from ..errors import RegistrySealedError, UnknownParameterError
from .constraints import MISSING, ConstraintBuilder, Constraints
from .types import ParameterSpec

logger = logging.getLogger(__name__)


class Accessor(NamedTuple):
    """Getter/setter pair for one parameter.

    ``getter(configuration)`` returns the current value.
    ``setter(configuration, value, host=None)`` validates and stores a value,
    returning what was stored.
    """
    getter: Callable[[Any], Any]
    setter: Callable[..., Any]


def _build_accessor(spec: ParameterSpec) -> Accessor:
    name = spec.name

    def getter(configuration) -> Any:
        # Configuration's sparse value store
        values = configuration._values
        if name not in values:
            if not spec.has_default:
                return None
            values[name] = spec.make_default()
        return values[name]

    def setter(configuration, value: Any, host: Any = None) -> Any:
        if host is None:
            host = configuration.host
        checked = spec.validate_value(value, locked=configuration.locked, host=host)
        configuration._values[name] = checked
        return checked

    getter.__name__ = f"get_{name}"
    setter.__name__ = f"set_{name}"
    return Accessor(getter, setter)


class ParameterRegistry:
    """Ordered collection of parameter specs for one configurable type.

    Example:
        >>> registry = ParameterRegistry(name="Server")
        >>> registry.declare("hostname", default="localhost", must_be=str)
        >>> registry.declare("port", default=8080, make_int=True, min=1, max=65535)
        >>> registry.names()
        ['hostname', 'port']
    """

    def __init__(self, specs: Iterable[ParameterSpec] = (), name: str = ""):
        self.name = name
        self._specs: Dict[str, ParameterSpec] = {}
        self._accessors: Dict[str, Accessor] = {}
        self._sealed = False
        for spec in specs:
            self.add(spec)

    def declare(
        self,
        name: str,
        constraints: Optional[Constraints] = None,
        *,
        default: Any = MISSING,
        default_factory: Optional[Callable[[], Any]] = None,
        doc: str = "",
        **options: Any,
    ) -> Accessor:
        """Declare a parameter and return its accessor pair.

        Constraints are given either as a Constraints object (or builder)
        or as option keywords, never both. Declaring an existing name
        replaces its spec in place: the last declaration wins.

        Args:
            name: Parameter name
            constraints: Prebuilt constraint set
            default: Default value, materialized on first read
            default_factory: Callable producing the default on first read
            doc: Human-readable description
            **options: Constraint options (see Constraints.from_options)

        Returns:
            The parameter's Accessor

        Raises:
            RegistrySealedError: If a Configuration already uses this registry
            TypeError: If both constraints and options are given, or an option is unknown
            ValueError: If the name is invalid or more than one coercion is requested
        """
        if constraints is not None and options:
            raise TypeError(
                f"Parameter {name}: pass either a Constraints object or constraint options, not both"
            )
        if isinstance(constraints, ConstraintBuilder):
            constraints = constraints.build()
        if constraints is None:
            constraints = Constraints.from_options(**options)
        return self.add(ParameterSpec(name, constraints, default, default_factory, doc))

    def add(self, spec: ParameterSpec) -> Accessor:
        """Register a prebuilt spec and return its accessor pair."""
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot declare '{spec.name}': registry {self.name or '<anonymous>'} is sealed "
                f"because a configuration was already created from it",
                spec.name,
            )
        if spec.name in self._specs:
            logger.debug(f"Re-declaring parameter '{spec.name}' on {self.name or '<anonymous>'}")

        accessor = _build_accessor(spec)
        self._specs[spec.name] = spec
        self._accessors[spec.name] = accessor
        return accessor

    def names(self) -> List[str]:
        """Get ordered list of parameter names."""
        return list(self._specs)

    @property
    def specs(self) -> Tuple[ParameterSpec, ...]:
        return tuple(self._specs.values())

    @property
    def accessors(self) -> Mapping[str, Accessor]:
        """Read-only view of the dispatch table."""
        return MappingProxyType(self._accessors)

    def get_spec(self, name: str) -> ParameterSpec:
        """Get specification for a parameter.

        Raises:
            UnknownParameterError: If the parameter was never declared
        """
        if name not in self._specs:
            raise self._unknown(name)
        return self._specs[name]

    def accessor(self, name: str) -> Accessor:
        """Get the accessor pair for a parameter.

        Raises:
            UnknownParameterError: If the parameter was never declared
        """
        try:
            return self._accessors[name]
        except KeyError:
            raise self._unknown(name) from None

    def seal(self) -> None:
        """Make the registry read-only. Idempotent."""
        if not self._sealed:
            logger.debug(f"Sealing registry {self.name or '<anonymous>'} with {len(self)} parameters")
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def extend(self, name: str = "") -> "ParameterRegistry":
        """Create a new, unsealed registry starting with this one's specs.

        Used for subclasses, which inherit their parent's parameters and may
        declare more.
        """
        return ParameterRegistry(self._specs.values(), name=name or self.name)

    def _unknown(self, name: Any) -> UnknownParameterError:
        available = ", ".join(self._specs) or "(none)"
        return UnknownParameterError(f"Unknown parameter: {name!r}. Available: {available}", name)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self._specs.values())

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"ParameterRegistry({self.name or '<anonymous>'}: {', '.join(self._specs)}; {state})"
