"""Minimal dependency injection container.

This package maps identifiers (classes or dotted class names) to concrete
classes or live instances, and builds objects by resolving their constructor
and method arguments from declared parameter types.

Exports:
- `Container`: Registry plus resolver. `Container.instance()` returns the
  process-wide container.
- `ContainerError` and its subclasses `NotFoundError`, `ReflectionError`,
  `UnsatisfiableParameterError` and `CircularDependencyError`.
- `identifier_of`: Normalizes a class or string to its registry identifier.
"""

from ._container import Container
from ._errors import (
    CircularDependencyError,
    ContainerError,
    NotFoundError,
    ReflectionError,
    UnsatisfiableParameterError,
)
from ._introspection import identifier_of


__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "NotFoundError",
    "ReflectionError",
    "UnsatisfiableParameterError",
    "identifier_of",
]
