"""Attach configurations to classes and their instances.

Subclassing Configurable gives a class its own ParameterRegistry and a
lazily created Configuration at the class level, at the instance level,
or both:

    class Server(Configurable, scope="both"):
        CONFIG_PARAMS = [
            ParameterSpec.from_options("hostname", default="localhost", must_be=str),
            ParameterSpec.from_options("port", default=8080, make_int=True, min=1),
        ]

    Server.configure(port=9000)          # class-level configuration
    server = Server()
    server.configure("server.yaml")      # this instance's configuration
    server.configuration.port

The class and every instance have separate configurations. Accessing a
level the scope does not provide raises ConfigurationScopeError.
"""

from typing import Any, Callable, ClassVar, Optional, Sequence

from .configuration import Configuration
from .constants import SCOPE_BOTH, SCOPE_CLASS, SCOPE_INSTANCE, SCOPES
from .errors import ConfigurationScopeError
from .parameters import Accessor, Constraints, ParameterRegistry, ParameterSpec


def _class_config_for(cls) -> Configuration:
    config = cls.__dict__.get("_class_configuration")
    if config is None:
        config = Configuration(cls.config_registry(), host=cls)
        cls._class_configuration = config
    return config


def _instance_config_for(obj) -> Configuration:
    state = vars(obj)
    config = state.get("_configuration")
    if config is None:
        config = Configuration(type(obj).config_registry(), host=obj)
        state["_configuration"] = config
    return config


class _Scoped:
    """Descriptor resolving to a class-level or an instance-level value.

    ``for_class(cls)`` is used when accessed on the class, ``for_instance(obj)``
    when accessed on an instance. The owner's CONFIG_SCOPE decides which
    levels are allowed.
    """

    def __init__(self, for_class: Callable[[type], Any], for_instance: Callable[[Any], Any]):
        self.for_class = for_class
        self.for_instance = for_instance
        self.name = ""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, owner=None):
        if owner is None:
            owner = type(obj)
        level = SCOPE_CLASS if obj is None else SCOPE_INSTANCE
        if owner.CONFIG_SCOPE not in (SCOPE_BOTH, level):
            raise ConfigurationScopeError(
                f"{owner.__name__} does not provide {level}-level configuration "
                f"(scope={owner.CONFIG_SCOPE!r}); '{self.name}' is unavailable here"
            )
        if obj is None:
            return self.for_class(owner)
        return self.for_instance(obj)


class Configurable:
    """Base class for types that carry declared configuration parameters.

    Subclasses MAY set:
    - CONFIG_PARAMS: ParameterSpecs declared in the class body
    - scope (class keyword): "both" (default), "class" or "instance"

    Parameters of parent classes are inherited. More can be declared with
    config_param() until the first configuration is created.
    """

    CONFIG_PARAMS: ClassVar[Sequence[ParameterSpec]] = ()
    CONFIG_SCOPE: ClassVar[str] = SCOPE_BOTH

    _config_registry: ClassVar[Optional[ParameterRegistry]] = None
    _class_configuration: ClassVar[Optional[Configuration]] = None

    def __init_subclass__(cls, scope: Optional[str] = None, **kwargs):
        """Build the subclass registry during class definition."""
        super().__init_subclass__(**kwargs)

        if scope is not None:
            cls.CONFIG_SCOPE = scope
        if cls.CONFIG_SCOPE not in SCOPES:
            raise ValueError(
                f"{cls.__name__}: scope must be one of {', '.join(SCOPES)}, got {cls.CONFIG_SCOPE!r}"
            )

        # Inherit parent parameters (don't clobber the parent's registry)
        parent = cls._config_registry
        if parent is not None:
            registry = parent.extend(name=cls.__qualname__)
        else:
            registry = ParameterRegistry(name=cls.__qualname__)

        for spec in cls.__dict__.get("CONFIG_PARAMS", ()):
            if not isinstance(spec, ParameterSpec):
                raise TypeError(
                    f"{cls.__name__}.CONFIG_PARAMS entries must be ParameterSpec instances, "
                    f"got {type(spec).__name__}"
                )
            registry.add(spec)

        cls._config_registry = registry
        cls._class_configuration = None

    @classmethod
    def config_registry(cls) -> ParameterRegistry:
        """The registry holding this class's declared parameters."""
        if cls._config_registry is None:
            raise TypeError("Configurable must be subclassed before it can be configured")
        return cls._config_registry

    @classmethod
    def config_param(cls, name: str, constraints: Optional[Constraints] = None, **options: Any) -> Accessor:
        """Declare a parameter on this class (see ParameterRegistry.declare)."""
        return cls.config_registry().declare(name, constraints, **options)

    configuration = _Scoped(_class_config_for, _instance_config_for)
    configure = _Scoped(
        lambda cls: _class_config_for(cls).configure,
        lambda obj: _instance_config_for(obj).configure,
    )
