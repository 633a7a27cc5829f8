from __future__ import annotations


class ContainerError(RuntimeError):
    """Base class for every error raised by the container."""


class NotFoundError(ContainerError, LookupError):
    """No registry entry exists for the requested identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Container entry not found for: {identifier}")


class ReflectionError(ContainerError):
    """An identifier cannot be turned into a constructible class, or a method is missing."""


class UnsatisfiableParameterError(ContainerError):
    """A parameter has no explicit value, no injectable type and no default."""

    def __init__(self, owner: str, parameter: str, annotation: str) -> None:
        self.owner = owner
        self.parameter = parameter
        msg = (
            f"Cannot satisfy parameter '{parameter}' of {owner}. "
            f"No override/injectable type/default found (annotation: {annotation})."
        )
        super().__init__(msg)


class CircularDependencyError(ContainerError):
    """A binding chain or a constructor dependency leads back to itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__("Circular dependency detected: " + " -> ".join(chain))
