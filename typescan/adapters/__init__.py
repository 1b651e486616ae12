"""Metadata adapters.

Modules:
- base.py: the accessor contract scanners read descriptors through.
- source.py: static descriptors from the module's ``ast``.
- introspection.py: descriptors from executing the module and ``inspect``.
- usage.py: call and attribute usage collection for member bodies.
"""

from .base import MetadataAdapter
from .introspection import IntrospectionAdapter
from .source import SourceAdapter, parse_python_module

__all__ = [
    "IntrospectionAdapter",
    "MetadataAdapter",
    "SourceAdapter",
    "parse_python_module",
]
