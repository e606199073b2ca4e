"""
API module for the QOD service.
Provides the FastAPI-based REST API for quotes and sources.
"""

__all__ = ['app', 'routes', 'models', 'middleware']
