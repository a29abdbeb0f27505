"""Tests for the process-wide composition root."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from servicebox.core import (
    AppSettings,
    ContainerSettings,
    LoggingSettings,
    ServiceContainer,
    get_container,
    get_container_status,
    get_service,
    initialize_container,
    load_app_settings,
    shutdown_container,
)


@pytest.fixture(autouse=True)
def fresh_runtime() -> Iterator[None]:
    """Give each test its own process-wide container."""

    shutdown_container()
    yield
    shutdown_container()


def _register_app_services(container: ServiceContainer) -> None:
    container.register_singleton("Config", lambda c: {"env": "test"})
    container.register_singleton(
        "Db", lambda c: {"cfg": c.get("Config")}, dependencies=["Config"]
    )


def test_get_container_returns_same_instance() -> None:
    assert get_container() is get_container()


def test_initialize_container_eagerly_resolves() -> None:
    settings = AppSettings(environment="test")

    container = initialize_container(settings, [_register_app_services])

    assert container is get_container()
    status = get_container_status()
    assert status.total_services == 4
    assert status.initialized_services == 4
    assert status.health.status == "healthy"
    assert get_service("Db")["cfg"]["env"] == "test"
    assert get_service("Config", dict) == {"env": "test"}


def test_initialize_container_can_stay_lazy() -> None:
    settings = AppSettings(container=ContainerSettings(eager_initialize=False))

    initialize_container(settings, [_register_app_services])

    assert get_container_status().initialized_services == 0


def test_shutdown_replaces_container() -> None:
    initialize_container(AppSettings(), [_register_app_services])
    before = get_container()

    shutdown_container()

    after = get_container()
    assert after is not before
    assert not after.has("Db")
    assert not before.has("Db")


def test_initialize_container_applies_logging_settings() -> None:
    settings = AppSettings(logging=LoggingSettings(level="DEBUG"))

    initialize_container(settings)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("servicebox").level == logging.DEBUG


def test_logging_level_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    load_app_settings.cache_clear()
    monkeypatch.setenv("SERVICEBOX_LOGGING__LEVEL", "ERROR")
    try:
        initialize_container()
    finally:
        load_app_settings.cache_clear()

    assert logging.getLogger().level == logging.ERROR
