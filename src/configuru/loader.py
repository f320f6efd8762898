"""Decoding of configuration files and streams.

The engine only understands native mappings and lists. This module turns
file paths and readable streams into that shape:

- ``.yaml``, ``.yml`` and ``.json`` files are read with PyYAML's
  ``safe_load`` (JSON is a subset of YAML)
- ``.toml`` files are read with ``tomllib``
- any other suffix, and every stream, is treated as YAML

An empty document decodes to an empty mapping. Parser failures are
re-raised as SourceDecodeError so callers can tell them apart from
validation errors.
"""

from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Union
import logging
import os
import tomllib

import yaml

from .errors import SourceDecodeError, SourceNotFoundError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = frozenset({".yaml", ".yml", ".json"})
TOML_SUFFIXES = frozenset({".toml"})

Decoded = Union[Dict[str, Any], List[Any]]


def _check_root(data: Any, label: str) -> Decoded:
    if data is None:
        return {}
    if not isinstance(data, (dict, list)):
        raise SourceDecodeError(
            f"Configuration source {label} must contain a mapping or a list, "
            f"got {type(data).__name__}"
        )
    return data


def _yaml_load(stream: IO, label: str) -> Any:
    try:
        return yaml.safe_load(stream)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise SourceDecodeError(f"Could not decode {label}: {e}") from e


def load_path(path: Union[str, os.PathLike]) -> Decoded:
    """Load a configuration file.

    Args:
        path: Path to a YAML, JSON or TOML file

    Returns:
        The decoded mapping or list

    Raises:
        SourceNotFoundError: If the file does not exist
        SourceDecodeError: If the file cannot be parsed or has a scalar root
    """
    path = Path(path)
    if not path.is_file():
        raise SourceNotFoundError(f"Configuration source not found: {path}")

    logger.info(f"Loading configuration source {path}")
    suffix = path.suffix.lower()

    if suffix in TOML_SUFFIXES:
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
                raise SourceDecodeError(f"Could not decode {path}: {e}") from e
    else:
        with path.open("r", encoding="utf-8") as f:
            data = _yaml_load(f, str(path))

    return _check_root(data, str(path))


def load_stream(stream: IO, name: Optional[str] = None) -> Decoded:
    """Load configuration from an open text or binary stream (YAML).

    Args:
        stream: Object with a ``read()`` method
        name: Label used in error messages (defaults to the stream's ``name``)

    Returns:
        The decoded mapping or list

    Raises:
        SourceDecodeError: If the stream cannot be parsed or has a scalar root
    """
    label = name or getattr(stream, "name", None) or f"<{type(stream).__name__}>"
    logger.info(f"Loading configuration source {label}")
    data = _yaml_load(stream, str(label))
    return _check_root(data, str(label))
