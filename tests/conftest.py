"""Shared fixtures for configuru tests."""

import textwrap

import pytest

from configuru.parameters import ParameterRegistry


@pytest.fixture
def server_registry():
    """Registry declaring a small server configuration."""
    registry = ParameterRegistry(name="Server")
    registry.declare("hostname", default="localhost", must_be=str, not_empty=True)
    registry.declare("port", default=8080, make_int=True, min=1, max=65535)
    registry.declare("debug", default=False, make_bool=True)
    registry.declare("tags", default_factory=list, make_array=True)
    registry.declare("workers", lockable=True, must_be=int, in_=range(1, 17))
    return registry


@pytest.fixture
def ab_registry():
    """Registry with two unconstrained parameters, a and b."""
    registry = ParameterRegistry(name="AB")
    registry.declare("a")
    registry.declare("b")
    return registry


@pytest.fixture
def write_file(tmp_path):
    """Write dedented text to a file under tmp_path and return its path."""
    def _write(name, text):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path
    return _write
