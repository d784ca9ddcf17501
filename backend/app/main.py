"""FastAPI entrypoint for the Grocery Tracker backend."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grocery_tracker.config import get_settings
from grocery_tracker.logging_config import setup_logging

from .middleware import register_error_handlers
from .routers import catalog, dashboard, migration, purchases


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Grocery Tracker API", version="1.0.0")
    allow_origins = settings.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(catalog.router, prefix="/api")
    app.include_router(purchases.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")
    app.include_router(migration.router, prefix="/api")

    @app.get("/", tags=["info"])
    def root() -> dict[str, str]:
        return {"message": "Grocery Tracker API", "version": "1.0.0", "docs": "/docs"}

    @app.get("/health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
