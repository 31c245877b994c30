"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn stellar_explorer.api_server.app:app --host 0.0.0.0 --port 3001
"""

from stellar_explorer.api_server.server import app

__all__ = ["app"]
