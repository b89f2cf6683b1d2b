"""
FastAPI/ASGI application entrypoint.

Builds the app from process settings (.env + environment).
Run with: uvicorn snifftools.api_server.app:app --host 0.0.0.0 --port 3000
"""

from snifftools.api_server.server import create_app

app = create_app()

__all__ = ["app"]
