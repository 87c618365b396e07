from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .audit import AuditLog
from .config import Settings, load_settings
from .relay import Relay
from .routers import logs as logs_router
from .routers import pages as pages_router
from .routers import websockets as ws_router

logger = logging.getLogger(__name__)


# Custom StaticFiles variant that disables caching so phones pick up a
# redeployed controller page on the next reload.
class NoCacheStaticFiles(StaticFiles):
    async def get_response(self, path: str, scope):  # type: ignore[override]
        response = await super().get_response(path, scope)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("Relay ready on port %s, default room = %s", settings.port, settings.default_room)
    yield
    await app.state.relay.shutdown()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own relay state."""
    settings = settings or load_settings()

    app = FastAPI(title="Pong Relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.relay = Relay(audit=AuditLog(settings.max_logs), default_room=settings.default_room)

    # Controllers and renderers may be served from other origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(ws_router.router)
    app.include_router(logs_router.router)
    app.include_router(pages_router.router)

    # Remaining controller assets (scripts, icons) at the root path.
    app.mount("/", NoCacheStaticFiles(directory=settings.static_dir, html=True), name="static")
    return app


app = create_app()

__all__ = ["app", "create_app", "NoCacheStaticFiles"]
