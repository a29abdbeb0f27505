"""Tests for per-unit-of-work scopes."""

from __future__ import annotations

import pytest

from servicebox.core import ScopeError, ServiceContainer


class Session:
    """Scoped instance stub."""

    def __init__(self, journal: list[str]) -> None:
        self.journal = journal

    def close(self) -> None:
        self.journal.append("closed")


@pytest.fixture()
def container() -> ServiceContainer:
    return ServiceContainer()


def test_scoped_instances_are_per_scope(container: ServiceContainer) -> None:
    journal: list[str] = []
    container.register_scoped("Session", lambda c: Session(journal))

    with container.create_scope() as first:
        a = first.get("Session")
        assert first.get("Session") is a

    with container.create_scope() as second:
        b = second.get("Session")

    assert a is not b
    assert journal == ["closed", "closed"]
    assert container.get_status().find("Session").has_instance is False


def test_scope_shares_singletons_with_root(container: ServiceContainer) -> None:
    container.register_singleton("Config", lambda c: object())
    root_config = container.get("Config")

    with container.create_scope() as scope:
        assert scope.get("Config") is root_config


def test_scoped_dependencies_resolve_within_scope(container: ServiceContainer) -> None:
    container.register_scoped("Session", lambda c: Session([]))
    container.register_scoped(
        "UnitOfWork",
        lambda c: {"session": c.get("Session")},
        dependencies=["Session"],
    )
    container.register_transient(
        "Handler", lambda c: {"uow": c.get("UnitOfWork")}, dependencies=["UnitOfWork"]
    )

    with container.create_scope() as scope:
        handler = scope.get("Handler")
        assert handler["uow"] is scope.get("UnitOfWork")
        assert handler["uow"]["session"] is scope.get("Session")

    assert container.get_status().initialization_order == ()


def test_singleton_in_scope_does_not_capture_scope(container: ServiceContainer) -> None:
    seen: list[object] = []

    def build(provider: object) -> str:
        seen.append(provider)
        return "singleton"

    container.register_singleton("Registry", build)

    with container.create_scope() as scope:
        scope.get("Registry")

    assert seen == [container]


def test_closed_scope_rejects_resolution(container: ServiceContainer) -> None:
    container.register_scoped("Session", lambda c: Session([]))
    scope = container.create_scope()
    scope.close()
    scope.close()

    assert scope.closed
    with pytest.raises(ScopeError):
        scope.get("Session")


def test_scope_try_get_and_has(container: ServiceContainer) -> None:
    container.register_scoped("Session", lambda c: Session([]))

    with container.create_scope() as scope:
        assert scope.has("Session")
        assert scope.try_get("Unknown", 42) == 42
        assert isinstance(scope.get("Session", Session), Session)


def test_reset_closes_open_scopes(container: ServiceContainer) -> None:
    journal: list[str] = []
    container.register_scoped("Session", lambda c: Session(journal))
    scope = container.create_scope()
    scope.get("Session")

    container.reset()

    assert journal == ["closed"]
    assert scope.closed
    with pytest.raises(ScopeError):
        scope.get("Session")


def test_dispose_closes_open_scopes(container: ServiceContainer) -> None:
    journal: list[str] = []
    container.register_scoped("Session", lambda c: Session(journal))
    scope = container.create_scope()
    scope.get("Session")

    container.dispose()

    assert journal == ["closed"]
    assert scope.closed
