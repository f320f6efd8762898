"""``configuru check``: apply sources to a declared configuration.

Loads a Configurable subclass or a ParameterRegistry, applies the given
sources in order, and prints the resulting values. The first
configuration error is reported and the command exits with status 1.
"""

import json
import logging
from typing import Any, List, Optional

import typer
import yaml
from typer.models import ArgumentInfo, OptionInfo

from ..configurable import Configurable
from ..configuration import Configuration
from ..constants import SCOPE_INSTANCE
from ..errors import ConfigurationError
from ..parameters import ParameterRegistry
from .targets import load_target

logger = logging.getLogger(__name__)

FORMATS = ("yaml", "json")


def _normalize_option_value(value):
    """Support calling the Typer command functions directly in tests."""
    return value.default if isinstance(value, (OptionInfo, ArgumentInfo)) else value


def _plain(value: Any) -> Any:
    """Reduce a value to something YAML and JSON can both represent."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return str(value)


def configuration_for(target: Any) -> Configuration:
    """Get the configuration a check should be applied to.

    A ParameterRegistry gets a fresh, unbound Configuration. A Configurable
    subclass uses its class-level configuration, or a new instance's when
    the class only provides instance-level configuration.

    Raises:
        TypeError: If the target is neither
    """
    if isinstance(target, ParameterRegistry):
        return Configuration(target)
    if isinstance(target, type) and issubclass(target, Configurable):
        if target.CONFIG_SCOPE == SCOPE_INSTANCE:
            return target().configuration
        return target.configuration
    raise TypeError(
        f"Expected a Configurable subclass or a ParameterRegistry, got {type(target).__name__}"
    )


def check_command(
    target: str = typer.Argument(..., help="Configurable class or registry (e.g., app.settings:Server)"),
    sources: List[str] = typer.Argument(..., help="Configuration files, applied in order ('-' reads stdin)"),
    output_format: str = typer.Option("yaml", "--format", "-f", help="Output format: yaml or json"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Directory importable while loading a module target (default: cwd)"),
):
    """Apply configuration sources and print the resulting values."""
    output_format = _normalize_option_value(output_format)
    project_root = _normalize_option_value(project_root)

    if output_format not in FORMATS:
        typer.echo(f"Error: --format must be one of {', '.join(FORMATS)}, got '{output_format}'", err=True)
        raise typer.Exit(1)

    try:
        configuration = configuration_for(load_target(target, search_path=project_root))
    except (ModuleNotFoundError, AttributeError, ValueError, TypeError) as e:
        typer.echo(f"Error: Could not load '{target}': {e}", err=True)
        raise typer.Exit(1)

    try:
        for source in sources:
            logger.info(f"Applying {source}")
            if source == "-":
                configuration.configure_from(typer.get_text_stream("stdin"))
            else:
                configuration.configure_from(source)
    except (ConfigurationError, ValueError, TypeError) as e:
        # Plain ValueError/TypeError come from user-supplied convert callables
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    values = _plain(configuration.as_dict())
    if output_format == "json":
        typer.echo(json.dumps(values, indent=2))
    else:
        typer.echo(yaml.safe_dump(values, sort_keys=False, default_flow_style=False).rstrip())
