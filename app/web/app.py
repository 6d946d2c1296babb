"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from app.web.routes import api_router

if TYPE_CHECKING:
    from app.context import AppContext


def create_app(ctx: AppContext) -> FastAPI:
    """Build the API app around an already-wired context."""
    app = FastAPI(title="ParrotOrganizer", version="0.1.0")
    app.state.ctx = ctx
    app.include_router(api_router, prefix="/api", tags=["api"])

    @app.get("/")
    def root():
        return {"message": "ParrotOrganizer", "docs": "/docs"}

    return app
