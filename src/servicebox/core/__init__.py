"""Core service container, configuration, and logging helpers."""

from .config import AppSettings, ContainerSettings, LoggingSettings, load_app_settings
from .container import ServiceContainer
from .errors import (
    CircularDependencyError,
    ContainerError,
    DisposalError,
    FactoryError,
    RegistrationError,
    ScopeError,
    ServiceNotFoundError,
    ServiceTypeError,
)
from .keys import CoreServiceKey
from .logging import configure_logging
from .models import (
    ContainerStatus,
    HealthReport,
    InitializationReport,
    ServiceLifecycle,
    ServiceStatus,
)
from .runtime import (
    get_container,
    get_container_status,
    get_service,
    initialize_container,
    shutdown_container,
)
from .scope import ServiceScope

__all__ = [
    "AppSettings",
    "CircularDependencyError",
    "ContainerError",
    "ContainerSettings",
    "ContainerStatus",
    "CoreServiceKey",
    "DisposalError",
    "FactoryError",
    "HealthReport",
    "InitializationReport",
    "LoggingSettings",
    "RegistrationError",
    "ScopeError",
    "ServiceContainer",
    "ServiceLifecycle",
    "ServiceNotFoundError",
    "ServiceScope",
    "ServiceStatus",
    "ServiceTypeError",
    "configure_logging",
    "get_container",
    "get_container_status",
    "get_service",
    "initialize_container",
    "load_app_settings",
    "shutdown_container",
]
