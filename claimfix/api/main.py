"""FastAPI application factory.

Assembles CORS and all API routers.
This module is the authoritative app object; claimfix/main.py re-exports it.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimfix.api.routes.claims import router as claims_router
from claimfix.api.routes.corrections import router as corrections_router
from claimfix.api.routes.health import router as health_router
from claimfix.core.logging import setup_logging
from claimfix.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(claims_router)
app.include_router(corrections_router)
