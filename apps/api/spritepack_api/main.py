"""FastAPI entrypoint for the sprite sheet service."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packages.spritepack_core.sheets.errors import (
    CompositeFailureError,
    InvalidSourcePathError,
    SourceUnreadableError,
    SpriteError,
    UnsupportedFormatError,
)

from .routers.sprites import router as sprites_router
from .storage.catalog import init_db as init_catalog_db
from .storage.catalog import ping as ping_catalog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("spritepack_api")

_STATUS_BY_ERROR: dict[type[SpriteError], int] = {
    SourceUnreadableError: 404,
    InvalidSourcePathError: 400,
    UnsupportedFormatError: 415,
    CompositeFailureError: 500,
}

app = FastAPI(title="Spritepack API", version="0.1.0")

_cors_origins = [o.strip() for o in os.environ.get("SPRITEPACK_CORS_ORIGINS", "*").split(",")]
_cors_allow_credentials = "*" not in _cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(sprites_router)


@app.exception_handler(SpriteError)
async def _sprite_error_handler(request: Request, exc: SpriteError):
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    logger.warning("[SPRITES] %s on %s: %s", exc.error_code, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=exc.as_dict())


@app.on_event("startup")
def startup() -> None:
    logger.info("[STARTUP] Spritepack API starting up at %s", datetime.now(timezone.utc).isoformat())
    try:
        logger.info("[STARTUP] Initializing sprite catalog...")
        init_catalog_db()
        logger.info("[STARTUP] Sprite catalog initialized successfully")
    except Exception as e:
        logger.error("[STARTUP] Failed to initialize sprite catalog: %s", e)
        raise
    logger.info("[STARTUP] Spritepack API startup complete")


@app.get("/healthz")
def healthz():
    logger.debug("[HEALTH] Health check requested")
    try:
        ping_catalog()
    except Exception as exc:
        logger.warning("[HEALTH] Catalog ping failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "error", "detail": str(exc)})
    return {"status": "ok"}
