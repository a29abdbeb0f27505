"""Per-unit-of-work scopes for ``scoped`` services."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

from .errors import DisposalError, ScopeError, ServiceTypeError

if TYPE_CHECKING:
    from .container import ServiceContainer

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def dispose_instance(key: str, instance: Any) -> bool:
    """Run the instance's ``dispose`` or ``close`` hook, logging failures.

    Returns True when a hook ran without raising.
    """
    hook = None
    for name in ("dispose", "close"):
        candidate = getattr(instance, name, None)
        if callable(candidate):
            hook = candidate
            break
    if hook is None:
        return False

    try:
        hook()
    except Exception as exc:  # pylint: disable=broad-except
        error = DisposalError(key)
        error.__cause__ = exc
        LOGGER.error("%s: %s", error, exc, exc_info=exc)
        return False
    LOGGER.debug("Disposed service %s", key)
    return True


class ServiceScope:
    """Holds one instance per ``scoped`` key until the scope is closed.

    Usage:
        with container.create_scope() as scope:
            session = scope.get("DbSession")
    """

    def __init__(self, container: ServiceContainer) -> None:
        self._container = container
        self._instances: dict[str, Any] = {}
        self._closed = False

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> ServiceScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # Public API ---------------------------------------------------------------
    @property
    def closed(self) -> bool:
        """Whether ``close`` has run."""
        return self._closed

    def get(self, key: str, expected_type: type[T] | None = None) -> Any:
        """Resolve ``key`` inside this scope."""
        name = str(key)
        with self._container.lock:
            if self._closed:
                raise ScopeError(f"Cannot resolve '{name}' from a closed scope")
            instance = self._container.resolve_in(name, self)
        if expected_type is not None and not isinstance(instance, expected_type):
            raise ServiceTypeError(name, expected_type, type(instance))
        return instance

    def try_get(self, key: str, default: Any = None) -> Any:
        """Resolve ``key`` if registered; return ``default`` otherwise."""
        if not self.has(key):
            return default
        return self.get(key)

    def has(self, key: str) -> bool:
        """Report whether ``key`` has a definition."""
        return self._container.has(key)

    def lookup(self, key: str) -> Any:
        """Return the cached instance for ``key`` or a sentinel."""
        return self._instances.get(key, _MISSING)

    def remember(self, key: str, instance: Any) -> None:
        """Cache a freshly built scoped instance."""
        self._instances[key] = instance

    def close(self) -> None:
        """Dispose scoped instances, newest first. Safe to call repeatedly."""
        with self._container.lock:
            if self._closed:
                return
            self._closed = True
            instances = list(self._instances.items())
            self._instances.clear()
        for key, instance in reversed(instances):
            dispose_instance(key, instance)
        LOGGER.debug("Closed scope holding %d instance(s)", len(instances))


def is_missing(value: Any) -> bool:
    """Tell whether ``value`` is the sentinel returned by ``lookup``."""
    return value is _MISSING


__all__ = ["ServiceScope", "dispose_instance", "is_missing"]
