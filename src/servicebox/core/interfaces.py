"""Protocol interfaces shared by the container and its scopes."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class ServiceProvider(Protocol):
    """Anything a factory can pull services from."""

    def get(self, key: str, expected_type: type[T] | None = None) -> Any:
        """Resolve ``key`` or raise a ``ContainerError``."""
        raise NotImplementedError

    def try_get(self, key: str, default: Any = None) -> Any:
        """Resolve ``key`` when registered, otherwise return ``default``."""
        raise NotImplementedError

    def has(self, key: str) -> bool:
        """Report whether ``key`` has a definition."""
        raise NotImplementedError


ServiceFactory = Callable[[ServiceProvider], Any]
Registration = Callable[[Any], None]


__all__ = ["Registration", "ServiceFactory", "ServiceProvider"]
