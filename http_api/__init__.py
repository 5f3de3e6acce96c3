"""
HTTP API Module

Thin FastAPI transport exposing the word store over HTTP.
"""

from .app import create_app, build_supervisor

__all__ = [
    'create_app',
    'build_supervisor',
]
