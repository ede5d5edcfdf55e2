"""HTTP API for browsing exports and building court documents."""

from court_export.api.server import create_app

__all__ = ["create_app"]
