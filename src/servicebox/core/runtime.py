"""Process-wide composition root.

The application builds exactly one container at start-up through
``initialize_container`` and tears it down with ``shutdown_container``.
Library code should receive the container as an argument instead of
calling ``get_container``; the accessor exists for the entry point and
for glue code that cannot be handed a reference.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable
from typing import Any, TypeVar

from .config import AppSettings, load_app_settings
from .container import ServiceContainer
from .interfaces import Registration
from .logging import configure_logging
from .models import ContainerStatus

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_container: ServiceContainer | None = None
_container_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """Get or create the process-wide container."""
    global _container  # pylint: disable=global-statement
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = ServiceContainer()
    return _container


def initialize_container(
    settings: AppSettings | None = None,
    registrations: Iterable[Registration] = (),
) -> ServiceContainer:
    """Initialise the process-wide container and apply registrations."""
    started = time.perf_counter()
    app_settings = settings or load_app_settings()
    configure_logging(app_settings.logging)
    container = get_container()
    container.initialize(app_settings)

    for registration in registrations:
        registration(container)

    if app_settings.container.eager_initialize:
        container.initialize_all()

    status = container.get_status()
    LOGGER.info(
        "Container ready in %.3fs: %d service(s), %d initialised, health %s",
        time.perf_counter() - started,
        status.total_services,
        status.initialized_services,
        status.health.status,
    )
    for issue in status.health.issues:
        LOGGER.warning("Container health issue: %s", issue)
    return container


def shutdown_container() -> None:
    """Dispose the process-wide container; the next access builds a new one."""
    global _container  # pylint: disable=global-statement
    with _container_lock:
        container, _container = _container, None
    if container is not None:
        container.dispose()
        LOGGER.info("Process-wide container shut down")


def get_container_status() -> ContainerStatus:
    return get_container().get_status()


def get_service(key: str, expected_type: type[T] | None = None) -> Any:
    """Resolve ``key`` from the process-wide container."""
    return get_container().get(key, expected_type)


__all__ = [
    "get_container",
    "get_container_status",
    "get_service",
    "initialize_container",
    "shutdown_container",
]
