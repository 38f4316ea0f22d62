# -*- coding: utf-8 -*-
"""
NutriAI backend API

Meal photo analysis, the NutriAI voice assistant, workouts and progress.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .app_db import init_app_db
from .auth.security import get_current_user_from_request
from .chat.api import router as chat_router
from .config import settings
from .diet.api import router as diet_router
from .functions.api import router as functions_router
from .profiles.api import router as profiles_router
from .progress.api import router as progress_router
from .voice.api import router as voice_router
from .workouts.api import router as workouts_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="NutriAI",
    description="Assistente de nutrição e treino com voz",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.db_path)


# Ensure the DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.db_path)


_GATED_PREFIXES = ("/api", "/functions")

_AUTH_EXEMPT_PREFIXES = (
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith(_GATED_PREFIXES) and not path.startswith(_AUTH_EXEMPT_PREFIXES):
        try:
            user = get_current_user_from_request(request)
            request.state.user = user
        except HTTPException as exc:
            if path.startswith("/functions"):
                return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(functions_router)
app.include_router(profiles_router)
app.include_router(diet_router)
app.include_router(workouts_router)
app.include_router(progress_router)
app.include_router(chat_router)
app.include_router(voice_router)


@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("NUTRIAI_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("NUTRIAI_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    logger.info("starting NutriAI on %s:%s", host, port)
    uvicorn.run("nutriai.api:app", host=host, port=port, reload=False)
