"""Resolution of configuration sources.

A source handed to ``Configuration.configure_from`` may be:

- a mapping of parameter names to values
- a list or tuple of sources, applied left to right
- a file path (``str`` or ``os.PathLike``), decoded by the loader
- a readable stream (anything with ``read()``), decoded by the loader

resolve_source() reduces each of those to a mapping or a sequence and
rejects everything else.
"""

from collections.abc import Mapping
from typing import Any, Sequence, Union
import os

from .errors import UnsupportedSourceError
from .loader import load_path, load_stream

Resolved = Union[Mapping, Sequence]


def is_source_sequence(source: Any) -> bool:
    """True for list/tuple sources, which are applied element by element."""
    return isinstance(source, (list, tuple))


def resolve_source(source: Any) -> Resolved:
    """Reduce a source to a mapping or a sequence of sources.

    Raises:
        UnsupportedSourceError: If the source has an unrecognized type
        SourceDecodeError: If a path or stream cannot be decoded
    """
    if isinstance(source, Mapping) or is_source_sequence(source):
        return source
    if isinstance(source, (str, os.PathLike)):
        return load_path(source)
    if callable(getattr(source, "read", None)):
        return load_stream(source)
    raise UnsupportedSourceError(source)
