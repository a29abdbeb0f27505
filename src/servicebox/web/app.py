"""FastAPI application exposing read-only container diagnostics."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, status as http_status
from fastapi.responses import JSONResponse

from servicebox.core import ContainerStatus, ServiceContainer, get_container
from servicebox.core.models import ServiceStatus

LOGGER = logging.getLogger(__name__)


def _serialize_service(service: ServiceStatus) -> dict[str, Any]:
    return {
        "key": service.key,
        "lifecycle": service.lifecycle,
        "initialized": service.initialized,
        "hasInstance": service.has_instance,
        "dependencies": list(service.dependencies),
        "metadata": service.metadata,
        "category": service.category,
    }


def _serialize_status(snapshot: ContainerStatus) -> dict[str, Any]:
    return {
        "totalServices": snapshot.total_services,
        "initializedServices": snapshot.initialized_services,
        "legacyServices": snapshot.legacy_services,
        "initializationOrder": list(snapshot.initialization_order),
        "initializationSeconds": round(snapshot.initialization_seconds, 3),
        "categoryStats": {
            category: {"total": stats.total, "initialized": stats.initialized}
            for category, stats in snapshot.category_stats.items()
        },
        "health": {
            "status": snapshot.health.status,
            "issues": list(snapshot.health.issues),
        },
        "services": [_serialize_service(service) for service in snapshot.services],
    }


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Create the diagnostics application for ``container``.

    Without an explicit container the process-wide one is reported.
    """
    app = FastAPI(title="Service Container Diagnostics")

    def _container() -> ServiceContainer:
        return container if container is not None else get_container()

    @app.get("/health")
    async def health() -> JSONResponse:
        report = _container().get_status().health
        code = (
            http_status.HTTP_200_OK
            if report.healthy
            else http_status.HTTP_503_SERVICE_UNAVAILABLE
        )
        if not report.healthy:
            LOGGER.warning("Health check degraded: %s", "; ".join(report.issues))
        return JSONResponse(
            status_code=code,
            content={"status": report.status, "issues": list(report.issues)},
        )

    @app.get("/api/services")
    async def services() -> dict[str, Any]:
        return _serialize_status(_container().get_status())

    @app.get("/api/services/{key}")
    async def service_detail(key: str) -> dict[str, Any]:
        entry = _container().get_status().find(key)
        if entry is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Service '{key}' is not registered",
            )
        return _serialize_service(entry)

    return app


__all__ = ["create_app"]
