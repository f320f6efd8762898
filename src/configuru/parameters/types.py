"""Parameter specification type.

A ParameterSpec describes one declared configuration parameter: its
name, its constraint set and its (lazily materialized) default. Specs are
immutable; a registry owns them and builds accessors from them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import copy
import keyword
import logging

from ..constants import RESERVED_NAMES
from .constraints import MISSING, ConstraintBuilder, Constraints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    """Specification for a single configuration parameter.

    Attributes:
        name: Parameter identifier (a valid, public Python identifier)
        constraints: Rules enforced on every write
        default: Value returned before anything is stored
        default_factory: Zero-argument callable producing the default
        doc: Human-readable description
    """
    name: str
    constraints: Constraints = field(default_factory=Constraints)
    default: Any = MISSING
    default_factory: Optional[Callable[[], Any]] = None
    doc: str = ""

    def __post_init__(self):
        """Validate parameter specification."""
        if not isinstance(self.name, str) or not self.name.isidentifier():
            raise ValueError(f"Parameter name must be a valid identifier, got {self.name!r}")
        if keyword.iskeyword(self.name):
            raise ValueError(f"Parameter name cannot be a Python keyword: '{self.name}'")
        if self.name.startswith("_"):
            raise ValueError(f"Parameter name cannot start with an underscore: '{self.name}'")
        if self.name in RESERVED_NAMES:
            raise ValueError(f"Parameter name '{self.name}' is reserved")

        if isinstance(self.constraints, ConstraintBuilder):
            object.__setattr__(self, "constraints", self.constraints.build())
        if not isinstance(self.constraints, Constraints):
            raise TypeError(
                f"Parameter {self.name}: constraints must be a Constraints instance, "
                f"got {type(self.constraints).__name__}"
            )

        if self.default is not MISSING and self.default_factory is not None:
            raise ValueError(f"Parameter {self.name}: cannot set both default and default_factory")
        if self.default_factory is not None and not callable(self.default_factory):
            raise TypeError(f"Parameter {self.name}: default_factory must be callable")

    @classmethod
    def from_options(
        cls,
        name: str,
        *,
        default: Any = MISSING,
        default_factory: Optional[Callable[[], Any]] = None,
        doc: str = "",
        **options: Any,
    ) -> "ParameterSpec":
        """Create a spec from an option bag.

        Example:
            >>> ParameterSpec.from_options("port", default=8080, make_int=True, min=1)
        """
        return cls(name, Constraints.from_options(**options), default, default_factory, doc)

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not None

    def make_default(self) -> Any:
        """Materialize a fresh default value for one configuration.

        Plain defaults are deep-copied so configurations never share a
        mutable default. Objects that cannot be copied, such as locks, are
        returned as declared.
        """
        if self.default_factory is not None:
            return self.default_factory()
        try:
            return copy.deepcopy(self.default)
        except (TypeError, copy.Error) as e:
            logger.debug(f"Default for '{self.name}' is shared, it cannot be copied: {e}")
            return self.default

    def validate_value(self, value: Any, *, locked: bool = False, host: Any = None) -> Any:
        """Run this parameter's constraint chain.

        Returns:
            The value to store, after coercion and conversion

        Raises:
            ConfigurationError: Subclass matching the first failed constraint
        """
        return self.constraints.apply(self.name, value, locked=locked, host=host)
