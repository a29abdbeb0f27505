"""Core data models describing registered services and container status."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .interfaces import ServiceFactory


class ServiceLifecycle(StrEnum):
    """Policy governing how often a factory is invoked."""

    SINGLETON = "singleton"
    TRANSIENT = "transient"
    SCOPED = "scoped"


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class ServiceDefinition:
    """Registration record for a single service key."""

    key: str
    factory: ServiceFactory
    lifecycle: ServiceLifecycle
    dependencies: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    instance: Any = None
    has_instance: bool = False
    initialized: bool = False

    @property
    def is_cached(self) -> bool:
        """Return True when resolution reuses a stored instance."""
        return self.lifecycle in (ServiceLifecycle.SINGLETON, ServiceLifecycle.SCOPED)

    @property
    def category(self) -> str:
        """Reporting category taken from metadata."""
        return str(self.metadata.get("category") or "unknown")

    @property
    def is_legacy(self) -> bool:
        """Whether this definition bridges a pre-existing accessor."""
        return bool(self.metadata.get("legacy", False))

    def store(self, instance: Any) -> None:
        """Cache an instance and mark the definition initialised."""
        self.instance = instance
        self.has_instance = True
        self.initialized = True

    def clear(self) -> None:
        """Forget any cached instance."""
        self.instance = None
        self.has_instance = False
        self.initialized = False


@dataclass(slots=True, frozen=True)
class ServiceStatus:
    """Read-only view of one definition."""

    key: str
    lifecycle: str
    initialized: bool
    has_instance: bool
    dependencies: tuple[str, ...]
    metadata: dict[str, Any]
    category: str


@dataclass(slots=True, frozen=True)
class CategoryStats:
    """Registration counts for a metadata category."""

    total: int
    initialized: int


@dataclass(slots=True, frozen=True)
class HealthReport:
    """Overall container health derived from registrations."""

    status: str
    issues: tuple[str, ...]

    @property
    def healthy(self) -> bool:
        return not self.issues


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True, frozen=True)
class ContainerStatus:
    """Snapshot returned by ``ServiceContainer.get_status``."""

    total_services: int
    initialized_services: int
    legacy_services: int
    initialization_order: tuple[str, ...]
    services: tuple[ServiceStatus, ...]
    category_stats: dict[str, CategoryStats]
    initialization_seconds: float
    health: HealthReport

    def find(self, key: str) -> ServiceStatus | None:
        """Return the status entry for ``key`` if registered."""
        for service in self.services:
            if service.key == key:
                return service
        return None


@dataclass(slots=True, frozen=True)
class InitializationReport:
    """Outcome of eagerly resolving every singleton."""

    succeeded: tuple[str, ...]
    failed: dict[str, str]
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return not self.failed


__all__ = [
    "CategoryStats",
    "ContainerStatus",
    "HealthReport",
    "InitializationReport",
    "ServiceDefinition",
    "ServiceLifecycle",
    "ServiceStatus",
]
