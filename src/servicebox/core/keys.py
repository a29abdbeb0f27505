"""Well-known service keys registered by the container itself."""

from __future__ import annotations

from enum import StrEnum


class CoreServiceKey(StrEnum):
    """Keys for the foundational definitions added by ``initialize``."""

    APP_SETTINGS = "AppSettings"
    CONTAINER_SETTINGS = "ContainerSettings"


__all__ = ["CoreServiceKey"]
