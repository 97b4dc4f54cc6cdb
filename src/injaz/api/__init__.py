"""HTTP API for Injaz."""

from injaz.api.main import create_app

__all__ = ["create_app"]
