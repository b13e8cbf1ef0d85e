"""
Testing utilities module.

Provides declaration builders and helpers that execute generated units
against the runtime container.
"""

from .utilities import (
    TestServiceCollection,
    build_provider,
    dependency,
    exec_unit,
    installed_module,
    interface_type,
    load_units,
    location,
    method,
    plain_type,
    prop,
    ref,
    service_type,
    type_param,
)

__all__ = [
    # Declarations
    "ref",
    "type_param",
    "location",
    "dependency",
    "method",
    "prop",
    "service_type",
    "plain_type",
    "interface_type",
    # Generated code
    "installed_module",
    "exec_unit",
    "load_units",
    "build_provider",
    # Runtime
    "TestServiceCollection",
]
