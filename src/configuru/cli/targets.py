"""Resolution of ``configuru check`` targets.

A target names the declarations a check runs against, either as
``package.module:Name`` or as ``path/to/settings.py:Name``. The name must
resolve to a Configurable subclass or a ParameterRegistry.
"""

from importlib import import_module
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import runpy
import sys

from ..configurable import Configurable
from ..parameters import ParameterRegistry

logger = logging.getLogger(__name__)

Target = Union[type, ParameterRegistry]


def _names_from_file(location: str) -> Dict[str, Any]:
    path = Path(location).resolve()
    if not path.is_file():
        raise ModuleNotFoundError(f"Target file does not exist: {path}")
    logger.info(f"Executing target file {path}")
    return runpy.run_path(str(path))


def _names_from_module(location: str, search_path: Optional[str]) -> Dict[str, Any]:
    root = str(Path(search_path or Path.cwd()).resolve())
    inserted = root not in sys.path
    if inserted:
        sys.path.insert(0, root)
    try:
        return vars(import_module(location))
    finally:
        if inserted:
            sys.path.remove(root)


def is_target(obj: Any) -> bool:
    """True for objects a check can build a configuration from."""
    if isinstance(obj, ParameterRegistry):
        return True
    return isinstance(obj, type) and issubclass(obj, Configurable)


def load_target(reference: str, search_path: Optional[str] = None) -> Target:
    """Resolve a ``location:Name`` reference to declared parameters.

    Args:
        reference: ``package.module:Name`` or ``path/to/file.py:Name``
        search_path: Directory importable while a module location is
            imported (default: the current directory)

    Returns:
        The Configurable subclass or ParameterRegistry named

    Raises:
        ValueError: If the reference is not ``location:Name``
        ModuleNotFoundError: If the location cannot be found
        AttributeError: If the location defines no such name
        TypeError: If the name is neither a Configurable nor a registry
    """
    location, _, name = reference.rpartition(":")
    if not location or not name.isidentifier():
        raise ValueError(f"Target must look like 'module:Name' or 'file.py:Name', got {reference!r}")

    if location.endswith(".py") or Path(location).parent != Path("."):
        names = _names_from_file(location)
    else:
        names = _names_from_module(location, search_path)

    if name not in names:
        raise AttributeError(f"{location} defines no '{name}'")
    target = names[name]
    if not is_target(target):
        raise TypeError(
            f"Expected a Configurable subclass or a ParameterRegistry, got {type(target).__name__}"
        )
    return target
