"""Constraint sets for configuration parameters.

A parameter's constraints are the declarative rules its setter enforces.
They are held in an immutable Constraints value and evaluated in a fixed
order on every write:

    lockable -> not_nil -> not_empty -> must_be -> must_respond_to
    -> coercion -> max -> min -> in -> convert

Checks after the coercion see the coerced value. The first failing check
raises; nothing is stored by this module.

Constraints can be created three ways:

    Constraints(not_nil=True, maximum=10)            # typed fields
    Constraints.from_options(not_nil=True, max=10)   # option bag
    ConstraintBuilder().not_nil().max(10).build()    # fluent builder
"""

from collections.abc import Iterable, Mapping, Sized
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union
import math
import numbers

from ..errors import (
    CapabilityMissingError,
    CoercionError,
    EmptyNotAllowedError,
    HostMissingError,
    LockedError,
    NullNotAllowedError,
    RangeError,
    TypeConstraintError,
)


class _Missing:
    """Sentinel type for 'no value declared'."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Coercion(Enum):
    """Target of a ``make_*`` coercion."""
    HASH = "hash"
    ARRAY = "array"
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0", ""})


def _make_hash(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (list, tuple)) and not value:
        return {}
    raise TypeError(f"{type(value).__name__} is not a mapping")


def _make_array(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, (str, bytes)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def _make_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _make_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an integer")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            raise ValueError(f"{value} is not finite")
        return int(value)
    if isinstance(value, str):
        return int(value.strip(), 10)
    raise TypeError(f"{type(value).__name__} is not an integer")


def _make_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise TypeError(f"{type(value).__name__} is not a number")
    return float(value)


def _make_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"'{value}' is not a boolean literal")
    return bool(value)


# Coercion registry
_COERCIONS: Dict[Coercion, Callable[[Any], Any]] = {
    Coercion.HASH: _make_hash,
    Coercion.ARRAY: _make_array,
    Coercion.STRING: _make_string,
    Coercion.INT: _make_int,
    Coercion.FLOAT: _make_float,
    Coercion.BOOL: _make_bool,
}

_COERCION_OPTIONS: Dict[str, Coercion] = {
    f"make_{coercion.value}": coercion for coercion in Coercion
}


def coerce(name: str, coercion: Coercion, value: Any) -> Any:
    """Apply a coercion to a value on behalf of parameter ``name``.

    Raises:
        CoercionError: If the value cannot be represented as the target type
    """
    try:
        return _COERCIONS[coercion](value)
    except (TypeError, ValueError, OverflowError) as e:
        raise CoercionError(
            f"'{name}' cannot be coerced to {coercion.value}: {value!r} ({e})", name
        ) from e


def _as_type_tuple(types: Any) -> Tuple[type, ...]:
    if types is None:
        return ()
    if isinstance(types, type):
        return (types,)
    result = tuple(types)
    for t in result:
        if not isinstance(t, type):
            raise TypeError(f"must_be expects types, got {t!r}")
    return result


def _as_name_tuple(names: Any) -> Tuple[str, ...]:
    if names is None:
        return ()
    if isinstance(names, str):
        return (names,)
    result = tuple(names)
    for n in result:
        if not isinstance(n, str):
            raise TypeError(f"must_respond_to expects attribute names, got {n!r}")
    return result


def _resolve_coercion(spec: Union[None, str, Coercion]) -> Optional[Coercion]:
    if spec is None or isinstance(spec, Coercion):
        return spec
    key = spec.lower()
    key = key[len("make_"):] if key.startswith("make_") else key
    try:
        return Coercion(key)
    except ValueError:
        available = ", ".join(c.value for c in Coercion)
        raise ValueError(f"Unknown coercion '{spec}'. Available: {available}") from None


@dataclass(frozen=True)
class Constraints:
    """Immutable set of rules enforced by a parameter's setter.

    Attributes:
        lockable: Reject writes while the configuration is locked
        not_nil: Reject None
        not_empty: Reject None and values whose len() is 0
        must_be: Allowed types (value must be an instance of one of them)
        must_respond_to: Attribute names the value must expose
        coercion: Target type the value is converted to before bound checks
        maximum: Inclusive upper bound
        minimum: Inclusive lower bound
        members: Container the value must belong to
        convert: Final transform; a callable, or the name of a host method
    """
    lockable: bool = False
    not_nil: bool = False
    not_empty: bool = False
    must_be: Tuple[type, ...] = ()
    must_respond_to: Tuple[str, ...] = ()
    coercion: Optional[Coercion] = None
    maximum: Any = MISSING
    minimum: Any = MISSING
    members: Any = MISSING
    convert: Union[None, str, Callable[[Any], Any]] = None

    def __post_init__(self):
        """Normalize collection fields and validate declared rules."""
        object.__setattr__(self, "must_be", _as_type_tuple(self.must_be))
        object.__setattr__(self, "must_respond_to", _as_name_tuple(self.must_respond_to))
        object.__setattr__(self, "coercion", _resolve_coercion(self.coercion))

        if self.members is not MISSING:
            if not hasattr(self.members, "__contains__"):
                if not isinstance(self.members, Iterable):
                    raise TypeError(
                        f"'in' constraint needs a container, got {type(self.members).__name__}"
                    )
                # One-shot iterables would be exhausted by the first check
                object.__setattr__(self, "members", tuple(self.members))

        if self.convert is not None and not (isinstance(self.convert, str) or callable(self.convert)):
            raise TypeError(
                f"convert must be a callable or a host method name, got {type(self.convert).__name__}"
            )

    @classmethod
    def from_options(cls, **options: Any) -> "Constraints":
        """Build constraints from an option bag.

        Recognized options: ``lockable``, ``not_nil``, ``not_empty``,
        ``must_be``, ``must_respond_to``, ``make_hash``, ``make_array``,
        ``make_string``, ``make_int``, ``make_float``, ``make_bool``,
        ``max``, ``min``, ``in`` (also spelled ``in_`` or ``within``) and
        ``convert``.

        Raises:
            TypeError: If an option name is not recognized
            ValueError: If more than one coercion is requested
        """
        kwargs: Dict[str, Any] = {}
        coercions = []

        for key, value in options.items():
            if key in ("lockable", "not_nil", "not_empty"):
                kwargs[key] = bool(value)
            elif key in ("must_be", "must_respond_to", "convert"):
                kwargs[key] = value
            elif key in _COERCION_OPTIONS:
                if value:
                    coercions.append(_COERCION_OPTIONS[key])
            elif key == "max":
                kwargs["maximum"] = value
            elif key == "min":
                kwargs["minimum"] = value
            elif key in ("in", "in_", "within"):
                if "members" in kwargs:
                    raise TypeError("Only one of 'in', 'in_' and 'within' may be given")
                kwargs["members"] = value
            else:
                raise TypeError(f"Unknown constraint option: '{key}'")

        if len(coercions) > 1:
            names = ", ".join(f"make_{c.value}" for c in coercions)
            raise ValueError(f"At most one coercion may be declared, got: {names}")
        if coercions:
            kwargs["coercion"] = coercions[0]

        return cls(**kwargs)

    def apply(self, name: str, value: Any, *, locked: bool = False, host: Any = None) -> Any:
        """Run the constraint chain for parameter ``name``.

        Args:
            name: Parameter name, used in error messages
            value: Incoming value
            locked: Whether the owning configuration is locked
            host: Object whose method a string ``convert`` names

        Returns:
            The value to store (coerced and converted)

        Raises:
            LockedError, NullNotAllowedError, EmptyNotAllowedError,
            TypeConstraintError, CapabilityMissingError, CoercionError,
            RangeError, HostMissingError: On the first failing check
        """
        if self.lockable and locked:
            raise LockedError(f"'{name}' cannot be set while the configuration is locked", name)

        if self.not_nil and value is None:
            raise NullNotAllowedError(f"'{name}' cannot be None", name)

        if self.not_empty and (value is None or (isinstance(value, Sized) and len(value) == 0)):
            raise EmptyNotAllowedError(f"'{name}' cannot be empty", name)

        if self.must_be and not isinstance(value, self.must_be):
            expected = ", ".join(t.__name__ for t in self.must_be)
            raise TypeConstraintError(
                f"Wrong type ({type(value).__name__}) for '{name}' value; expected {expected}", name
            )

        for capability in self.must_respond_to:
            if not hasattr(value, capability):
                raise CapabilityMissingError(
                    f"'{name}' must respond to '{capability}'", name, capability
                )

        if self.coercion is not None:
            value = coerce(name, self.coercion, value)

        if self.maximum is not MISSING and self._compare(name, value, self.maximum, ">"):
            raise RangeError(f"'{name}' must be not more than {self.maximum!r}, got {value!r}", name)

        if self.minimum is not MISSING and self._compare(name, value, self.minimum, "<"):
            raise RangeError(f"'{name}' must be not less than {self.minimum!r}, got {value!r}", name)

        if self.members is not MISSING:
            try:
                member = value in self.members
            except TypeError as e:
                raise RangeError(f"'{name}' is out of range: {value!r}", name) from e
            if not member:
                raise RangeError(f"'{name}' is out of range: {value!r}", name)

        if isinstance(self.convert, str):
            if host is None:
                raise HostMissingError(
                    f"'{name}' converts through host method '{self.convert}' but no host is bound",
                    name,
                )
            value = getattr(host, self.convert)(value)
        elif self.convert is not None:
            value = self.convert(value)

        return value

    @staticmethod
    def _compare(name: str, value: Any, bound: Any, op: str) -> bool:
        try:
            return value > bound if op == ">" else value < bound
        except TypeError as e:
            raise TypeConstraintError(
                f"'{name}' value {value!r} cannot be compared with bound {bound!r}", name
            ) from e


@dataclass(frozen=True)
class ConstraintBuilder:
    """Fluent builder for Constraints.

    The builder is immutable: each method returns a new builder, so partial
    builders can be shared and extended.

    Example:
        >>> port = (ConstraintBuilder()
        ...         .not_nil()
        ...         .make_int()
        ...         .min(1)
        ...         .max(65535)
        ...         .build())
    """
    _constraints: Constraints = field(default_factory=Constraints)

    def _with(self, **changes: Any) -> "ConstraintBuilder":
        return ConstraintBuilder(replace(self._constraints, **changes))

    def lockable(self, flag: bool = True) -> "ConstraintBuilder":
        return self._with(lockable=flag)

    def not_nil(self, flag: bool = True) -> "ConstraintBuilder":
        return self._with(not_nil=flag)

    def not_empty(self, flag: bool = True) -> "ConstraintBuilder":
        return self._with(not_empty=flag)

    def must_be(self, *types: type) -> "ConstraintBuilder":
        return self._with(must_be=self._constraints.must_be + _as_type_tuple(types))

    def must_respond_to(self, *names: str) -> "ConstraintBuilder":
        return self._with(must_respond_to=self._constraints.must_respond_to + _as_name_tuple(names))

    def make(self, coercion: Union[str, Coercion]) -> "ConstraintBuilder":
        """Set the coercion; raises ValueError if one is already set."""
        resolved = _resolve_coercion(coercion)
        current = self._constraints.coercion
        if current is not None and current is not resolved:
            raise ValueError(
                f"At most one coercion may be declared, got: make_{current.value}, make_{resolved.value}"
            )
        return self._with(coercion=resolved)

    def make_hash(self) -> "ConstraintBuilder":
        return self.make(Coercion.HASH)

    def make_array(self) -> "ConstraintBuilder":
        return self.make(Coercion.ARRAY)

    def make_string(self) -> "ConstraintBuilder":
        return self.make(Coercion.STRING)

    def make_int(self) -> "ConstraintBuilder":
        return self.make(Coercion.INT)

    def make_float(self) -> "ConstraintBuilder":
        return self.make(Coercion.FLOAT)

    def make_bool(self) -> "ConstraintBuilder":
        return self.make(Coercion.BOOL)

    def max(self, bound: Any) -> "ConstraintBuilder":
        return self._with(maximum=bound)

    def min(self, bound: Any) -> "ConstraintBuilder":
        return self._with(minimum=bound)

    def within(self, members: Any) -> "ConstraintBuilder":
        return self._with(members=members)

    def convert(self, transform: Union[str, Callable[[Any], Any]]) -> "ConstraintBuilder":
        return self._with(convert=transform)

    def build(self) -> Constraints:
        return self._constraints
