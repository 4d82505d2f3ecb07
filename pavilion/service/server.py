"""FastAPI application for the pavilion scene config service."""
from __future__ import annotations

from fastapi import FastAPI

from pavilion.service.routes import router


def create_app() -> FastAPI:
    app = FastAPI(title="Pavilion Scene Config", version="0.1.0")
    app.include_router(router)
    return app


app = create_app()
