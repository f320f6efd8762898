"""Global constants for configuru.

This module centralizes names that are reserved by the framework so the
registry, the engine and the loader agree on them.
"""

# Key that, inside a source mapping, names a nested source to merge in place
OPTIONS_SOURCE_KEY: str = "options_source"

# Public attributes of Configuration; parameters may not shadow them
RESERVED_NAMES: frozenset = frozenset({
    OPTIONS_SOURCE_KEY,
    "registry",
    "host",
    "bind",
    "locked",
    "lock",
    "unlock",
    "get",
    "set",
    "param_names",
    "as_dict",
    "configure",
    "configure_from",
})

# Scopes accepted by Configurable subclasses
SCOPE_BOTH: str = "both"
SCOPE_CLASS: str = "class"
SCOPE_INSTANCE: str = "instance"
SCOPES: tuple = (SCOPE_BOTH, SCOPE_CLASS, SCOPE_INSTANCE)
