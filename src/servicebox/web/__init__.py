"""Web diagnostics entry point for the service container."""

from .app import create_app

app = create_app()

__all__ = ["create_app", "app"]
