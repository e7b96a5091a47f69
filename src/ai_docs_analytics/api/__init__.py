"""HTTP API: tracking, detection and report queries."""

from .app import create_app

__all__ = ["create_app"]
