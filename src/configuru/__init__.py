"""configuru: declarative, validated configuration parameters.

Types declare named parameters with constraints once; configurations
built from those declarations are populated from mappings, lists of
sources, YAML/JSON/TOML files and streams, with every write validated.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
