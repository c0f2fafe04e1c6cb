"""
HTTP layer - FastAPI routes and the request/response codec.
"""

from .server import create_app, create_app_from_env

__all__ = ["create_app", "create_app_from_env"]
