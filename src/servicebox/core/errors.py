"""Exception hierarchy raised by the service container."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class ContainerError(RuntimeError):
    """Base class for every error raised by the container."""


class RegistrationError(ContainerError):
    """Raised when a service definition is invalid."""


class ServiceNotFoundError(ContainerError):
    """Raised when resolving a key that has no definition."""

    def __init__(self, key: str, available: Iterable[str] = ()) -> None:
        self.key = key
        self.available = tuple(available)
        listing = ", ".join(self.available) or "<none>"
        super().__init__(
            f"Service '{key}' is not registered. Registered services: {listing}"
        )


class CircularDependencyError(ContainerError):
    """Raised when resolution would revisit a key on the active path."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.cycle)}")


class FactoryError(ContainerError):
    """Wrap an exception thrown by a service factory."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Factory for service '{key}' failed")


class ServiceTypeError(ContainerError, TypeError):
    """Raised when a resolved instance does not match the requested type."""

    def __init__(self, key: str, expected: type, actual: type) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Service '{key}' resolved to {actual.__name__}, "
            f"expected {expected.__name__}"
        )


class DisposalError(ContainerError):
    """Wrap an exception thrown by an instance's disposal hook."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Disposal of service '{key}' failed")


class ScopeError(ContainerError):
    """Raised when a closed scope is used."""


__all__ = [
    "CircularDependencyError",
    "ContainerError",
    "DisposalError",
    "FactoryError",
    "RegistrationError",
    "ScopeError",
    "ServiceNotFoundError",
    "ServiceTypeError",
]
