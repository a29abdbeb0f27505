"""Service container handling registration, resolution and teardown."""

from __future__ import annotations

import logging
import threading
import time
import weakref
from collections.abc import Callable, Iterable, Mapping
from types import TracebackType
from typing import Any, TypeVar, overload

from .config import AppSettings, ContainerSettings, load_app_settings
from .errors import (
    CircularDependencyError,
    ContainerError,
    FactoryError,
    RegistrationError,
    ServiceNotFoundError,
    ServiceTypeError,
)
from .interfaces import ServiceFactory
from .keys import CoreServiceKey
from .models import (
    CategoryStats,
    ContainerStatus,
    HealthReport,
    InitializationReport,
    ServiceDefinition,
    ServiceLifecycle,
    ServiceStatus,
)
from .scope import ServiceScope, dispose_instance, is_missing

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceContainer:
    """Dependency container keyed by strings.

    Factories receive the container (or the active scope) and may pull
    further services from it. Declared dependencies are resolved depth-first
    before the factory runs; cycles raise ``CircularDependencyError``.

    Usage:
        container = ServiceContainer()
        container.register_singleton("Config", lambda c: {"env": "test"})
        container.register_singleton(
            "Db", lambda c: Database(c.get("Config")), dependencies=["Config"]
        )
        db = container.get("Db", Database)
    """

    def __init__(self) -> None:
        """Initialise container storage."""
        self._services: dict[str, ServiceDefinition] = {}
        self._resolution_stack: list[str] = []
        self._initialization_order: list[str] = []
        self._settings: ContainerSettings | None = None
        self._started_at: float | None = None
        self._eager_ran = False
        self._lock = threading.RLock()
        self._scopes: weakref.WeakSet[ServiceScope] = weakref.WeakSet()

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> ServiceContainer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        return len(self._services)

    @property
    def lock(self) -> threading.RLock:
        """Re-entrant lock guarding registry and resolution state."""
        return self._lock

    @property
    def initialization_order(self) -> tuple[str, ...]:
        """Keys of cached instances in the order they were first built."""
        return tuple(self._initialization_order)

    # Bootstrap ----------------------------------------------------------------
    def initialize(self, settings: AppSettings | None = None) -> None:
        """Register the foundational configuration services."""
        app_settings = settings or load_app_settings()
        with self._lock:
            self._started_at = time.perf_counter()
            self._settings = app_settings.container
            self.register_instance(
                CoreServiceKey.APP_SETTINGS,
                app_settings,
                metadata={"description": "Application settings", "category": "config"},
            )
            self.register_singleton(
                CoreServiceKey.CONTAINER_SETTINGS,
                lambda provider: provider.get(
                    CoreServiceKey.APP_SETTINGS, AppSettings
                ).container,
                dependencies=[CoreServiceKey.APP_SETTINGS],
                metadata={"description": "Container settings", "category": "config"},
            )
        LOGGER.info(
            "Service container initialised for environment %s",
            app_settings.environment,
        )

    # Registration -------------------------------------------------------------
    def register(
        self,
        key: str,
        factory: ServiceFactory,
        lifecycle: ServiceLifecycle | str = ServiceLifecycle.SINGLETON,
        dependencies: Iterable[str] = (),
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Store a definition, replacing any previous one for ``key``."""
        name = str(key)
        if not callable(factory):
            raise RegistrationError(f"Factory for service '{name}' is not callable")
        try:
            kind = ServiceLifecycle(lifecycle)
        except ValueError as exc:
            raise RegistrationError(
                f"Unknown lifecycle '{lifecycle}' for service '{name}'"
            ) from exc
        if isinstance(dependencies, str):
            dependencies = (dependencies,)
        declared = tuple(dict.fromkeys(str(dependency) for dependency in dependencies))

        definition = ServiceDefinition(
            key=name,
            factory=factory,
            lifecycle=kind,
            dependencies=declared,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            if name in self._services:
                LOGGER.warning("Service '%s' is already registered; overwriting", name)
                self._forget(name)
            self._services[name] = definition
        LOGGER.debug("Registered service %s (%s)", name, kind.value)

    def register_singleton(
        self,
        key: str,
        factory: ServiceFactory,
        dependencies: Iterable[str] = (),
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Register ``factory`` as a singleton."""
        self.register(key, factory, ServiceLifecycle.SINGLETON, dependencies, metadata)

    def register_transient(
        self,
        key: str,
        factory: ServiceFactory,
        dependencies: Iterable[str] = (),
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Register ``factory`` to run on every resolution."""
        self.register(key, factory, ServiceLifecycle.TRANSIENT, dependencies, metadata)

    def register_scoped(
        self,
        key: str,
        factory: ServiceFactory,
        dependencies: Iterable[str] = (),
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Register ``factory`` for one instance per scope."""
        self.register(key, factory, ServiceLifecycle.SCOPED, dependencies, metadata)

    def register_instance(
        self,
        key: str,
        instance: Any,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Register an already constructed object as a singleton."""

        def provide(_: Any) -> Any:
            return instance

        self.register(key, provide, ServiceLifecycle.SINGLETON, (), metadata)

    def register_legacy(
        self,
        key: str,
        accessor: Callable[[], Any],
        dependencies: Iterable[str] = (),
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Bridge a zero-argument accessor into a cached singleton."""
        if not callable(accessor):
            raise RegistrationError(f"Legacy accessor for '{key}' is not callable")
        tagged = {"category": "legacy", **(metadata or {}), "legacy": True}

        def bridge(_: Any) -> Any:
            return accessor()

        self.register(key, bridge, ServiceLifecycle.SINGLETON, dependencies, tagged)

    def has(self, key: str) -> bool:
        """Report whether ``key`` has a definition."""
        return str(key) in self._services

    def keys(self) -> tuple[str, ...]:
        """Registered keys in registration order."""
        with self._lock:
            return tuple(self._services)

    def remove(self, key: str) -> bool:
        """Evict a definition, disposing its live instance first."""
        name = str(key)
        with self._lock:
            definition = self._services.get(name)
            if definition is None:
                LOGGER.debug("Cannot remove unknown service %s", name)
                return False
            if definition.has_instance:
                dispose_instance(name, definition.instance)
            del self._services[name]
            self._forget(name)
        LOGGER.info("Removed service %s", name)
        return True

    # Resolution ---------------------------------------------------------------
    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, expected_type: type[T]) -> T: ...

    def get(self, key: str, expected_type: type[T] | None = None) -> Any:
        """Resolve ``key``, building its dependencies first when needed."""
        name = str(key)
        with self._lock:
            instance = self.resolve_in(name, None)
        if expected_type is not None and not isinstance(instance, expected_type):
            raise ServiceTypeError(name, expected_type, type(instance))
        return instance

    def try_get(self, key: str, default: Any = None) -> Any:
        """Resolve ``key`` if registered; return ``default`` otherwise."""
        if not self.has(key):
            return default
        return self.get(key)

    def create_scope(self) -> ServiceScope:
        """Open a scope holding its own ``scoped`` instances."""
        scope = ServiceScope(self)
        with self._lock:
            self._scopes.add(scope)
        return scope

    def resolve_in(self, key: str, scope: ServiceScope | None) -> Any:
        """Resolve ``key`` for the root container or ``scope``.

        Callers must hold ``lock``.
        """
        if key in self._resolution_stack:
            start = self._resolution_stack.index(key)
            raise CircularDependencyError([*self._resolution_stack[start:], key])

        definition = self._services.get(key)
        if definition is None:
            raise ServiceNotFoundError(key, self._services)

        per_scope = scope is not None and definition.lifecycle is ServiceLifecycle.SCOPED
        if per_scope:
            cached = scope.lookup(key)
            if not is_missing(cached):
                return cached
        elif definition.is_cached and definition.has_instance:
            return definition.instance

        # Singletons are always built against the root container.
        active_scope = None if definition.lifecycle is ServiceLifecycle.SINGLETON else scope
        provider: Any = active_scope if active_scope is not None else self

        self._resolution_stack.append(key)
        started = time.perf_counter()
        try:
            if definition.dependencies:
                LOGGER.debug(
                    "Resolving %s (dependencies: %s)",
                    key,
                    ", ".join(definition.dependencies),
                )
            for dependency in definition.dependencies:
                self.resolve_in(dependency, active_scope)

            try:
                instance = definition.factory(provider)
            except ContainerError:
                raise
            except Exception as exc:
                LOGGER.error("Factory for service '%s' raised %r", key, exc)
                raise FactoryError(
                    key, f"Factory for service '{key}' failed: {exc}"
                ) from exc

            if per_scope:
                scope.remember(key, instance)
            elif definition.is_cached:
                definition.store(instance)
                if key not in self._initialization_order:
                    self._initialization_order.append(key)
            LOGGER.debug(
                "Resolved %s in %.1fms", key, (time.perf_counter() - started) * 1000
            )
            return instance
        finally:
            self._resolution_stack.pop()

    # Lifecycle ----------------------------------------------------------------
    def initialize_all(self) -> InitializationReport:
        """Resolve every singleton, logging failures instead of raising."""
        started = time.perf_counter()
        with self._lock:
            keys = [
                name
                for name, definition in self._services.items()
                if definition.lifecycle is ServiceLifecycle.SINGLETON
            ]
        LOGGER.info("Initialising %d singleton service(s)", len(keys))

        succeeded: list[str] = []
        failed: dict[str, str] = {}
        for name in keys:
            try:
                self.get(name)
            except ContainerError as exc:
                LOGGER.error("Service '%s' failed to initialise: %s", name, exc)
                failed[name] = str(exc)
            else:
                succeeded.append(name)

        with self._lock:
            self._eager_ran = True
        duration = time.perf_counter() - started
        LOGGER.info(
            "Initialisation finished in %.3fs: %d succeeded, %d failed",
            duration,
            len(succeeded),
            len(failed),
        )
        LOGGER.debug("Initialisation order: %s", self._initialization_order)
        return InitializationReport(
            succeeded=tuple(succeeded), failed=failed, duration_seconds=duration
        )

    def get_status(self) -> ContainerStatus:
        """Return a snapshot of every definition without touching state."""
        with self._lock:
            services = tuple(
                ServiceStatus(
                    key=name,
                    lifecycle=definition.lifecycle.value,
                    initialized=definition.initialized,
                    has_instance=definition.has_instance,
                    dependencies=definition.dependencies,
                    metadata=dict(definition.metadata),
                    category=definition.category,
                )
                for name, definition in self._services.items()
            )
            totals: dict[str, list[int]] = {}
            for service in services:
                counts = totals.setdefault(service.category, [0, 0])
                counts[0] += 1
                if service.initialized:
                    counts[1] += 1
            elapsed = (
                time.perf_counter() - self._started_at
                if self._started_at is not None
                else 0.0
            )
            return ContainerStatus(
                total_services=len(services),
                initialized_services=sum(1 for s in services if s.initialized),
                legacy_services=sum(
                    1 for d in self._services.values() if d.is_legacy
                ),
                initialization_order=tuple(self._initialization_order),
                services=services,
                category_stats={
                    category: CategoryStats(total=total, initialized=initialized)
                    for category, (total, initialized) in totals.items()
                },
                initialization_seconds=elapsed,
                health=self._health(),
            )

    def reset(self) -> None:
        """Dispose every live instance but keep the definitions."""
        with self._lock:
            for scope in list(self._scopes):
                scope.close()
            self._scopes.clear()
            # Dependents before their dependencies.
            ordered = [*reversed(self._initialization_order)]
            ordered += [name for name in self._services if name not in ordered]
            released = 0
            for name in ordered:
                definition = self._services.get(name)
                if definition is None:
                    continue
                if definition.has_instance:
                    dispose_instance(name, definition.instance)
                    released += 1
                definition.clear()
            self._resolution_stack.clear()
            self._initialization_order.clear()
            self._started_at = None
            self._eager_ran = False
        LOGGER.info("Service container reset; released %d instance(s)", released)

    def dispose(self) -> None:
        """Reset and drop every definition. The container is spent afterwards."""
        with self._lock:
            self.reset()
            self._services.clear()
            self._settings = None
        LOGGER.info("Service container disposed")

    # Internal helpers ---------------------------------------------------------
    def _forget(self, name: str) -> None:
        if name in self._initialization_order:
            self._initialization_order.remove(name)

    def _health(self) -> HealthReport:
        issues: list[str] = []
        required = self._settings.required_services if self._settings else ()
        for key in required:
            if key not in self._services:
                issues.append(f"Missing required service: {key}")
        if self._eager_ran:
            pending = [
                name
                for name, definition in self._services.items()
                if definition.lifecycle is ServiceLifecycle.SINGLETON
                and not definition.initialized
            ]
            if pending:
                issues.append(f"Uninitialised services: {', '.join(pending)}")
        return HealthReport(
            status="healthy" if not issues else "degraded", issues=tuple(issues)
        )


__all__ = ["ServiceContainer"]
