"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from repairshop.api.router import api_router
from repairshop.config import get_settings
from repairshop.db.engine import create_tables, engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await create_tables()
    logger.info("Repair shop service started")
    yield
    await engine.dispose()


app = FastAPI(
    title="Repair Shop",
    description="Workshop management: assessments, client approval per task, work orders and invoices.",
    version="0.1.0",
    lifespan=lifespan,
)

# API routes
app.include_router(api_router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
